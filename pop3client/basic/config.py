import os
import pathlib
import threading
import yaml

DEFAULTS = {
    'POP3_PORT': 110,
    'POP3_SSL_PORT': 995,
    'TIMEOUT': None,
    'ENCODING': 'UTF-8',
    'STRICT_STATE': False,
    'DOT_UNSTUFF': False,
    'LOG_DIR': None,
    'LOG_LEVEL': 'INFO',
}


class Config:
    _config = None
    _instance_lock = threading.Lock()

    @classmethod
    def get_instance(cls):
        if cls._config is None:
            with cls._instance_lock:
                if cls._config is None:
                    cls._config = cls._load(cls.path())

        return cls._config

    @classmethod
    def reset(cls):
        with cls._instance_lock:
            cls._config = None

    @staticmethod
    def path():
        env = os.environ.get('POP3CLIENT_CONFIG')
        if env:
            return pathlib.Path(env)
        path = pathlib.Path(__file__).parent.parent.parent
        return pathlib.Path.joinpath(path, 'config.yaml')

    @staticmethod
    def _load(path):
        config = dict(DEFAULTS)
        if not path.is_file():
            return config

        with open(str(path), 'rb') as f:
            loaded = yaml.safe_load(f.read())

        # 空文件返回 None
        if loaded is None:
            return config
        if not isinstance(loaded, dict):
            raise ValueError(f'config file {path} must contain a mapping')
        config.update(loaded)
        return config
