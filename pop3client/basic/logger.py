import logging
import pathlib

from logging.handlers import TimedRotatingFileHandler

from pop3client.basic.config import Config

FORMAT = '[%(asctime)s][%(filename)s:%(lineno)d][%(levelname)s][%(thread)d] - %(message)s'


def get_logger(name) -> logging.Logger:
    logger = logging.getLogger(name)
    # 同一个 logger 只添加一次 handler
    if getattr(logger, '_pop3client_configured', False):
        return logger

    config = Config.get_instance()
    formatter = logging.Formatter(FORMAT)

    handler_stream = logging.StreamHandler()
    handler_stream.setLevel(logging.DEBUG)
    handler_stream.setFormatter(formatter)
    logger.addHandler(handler_stream)

    if config['LOG_DIR']:
        path = pathlib.Path(config['LOG_DIR'])
        path.mkdir(parents=True, exist_ok=True)
        path = pathlib.Path.joinpath(path, 'pop3client.log')

        handler_file = TimedRotatingFileHandler(
            path, when='D', interval=1, backupCount=15,
            encoding='UTF-8', delay=True, utc=False,
        )
        handler_file.setLevel(logging.INFO)
        handler_file.setFormatter(formatter)
        logger.addHandler(handler_file)

    logger.setLevel(level=config['LOG_LEVEL'])
    logger._pop3client_configured = True
    return logger
