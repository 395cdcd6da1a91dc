import re
import socket
import ssl
import threading

from pop3client.basic import Config, get_logger
from pop3client.lib.pop_proto import Command, Conn
from pop3client.models.errors import ErrorProto, ErrorFormat, ErrorResponse, ErrorState
from pop3client.models.pop3 import MessageInfo, SessionState, ALLOWED_STATES

__all__ = ['POP3', 'dial', 'dial_ssl', 'convert_number_and_size', 'convert_number_and_uid']

log = get_logger(__name__)

_NUMBER = re.compile(r'[+-]?[0-9]+')
_SIZE = re.compile(r'[0-9]+')
_MAX_SIZE = 2 ** 64 - 1


def _split(line):
    fields = line.split()
    if len(fields) < 2:
        raise ErrorFormat(f'fewer than 2 fields: {line}', line)
    return fields


def _to_number(field, line):
    if not _NUMBER.fullmatch(field):
        raise ErrorFormat(f'field 0 is not an integer: {line}', line)
    return int(field)


def convert_number_and_size(line):
    """把 "1 4404" 这样的文本转换为 (1, 4404)"""
    fields = _split(line)
    number = _to_number(fields[0], line)
    if not _SIZE.fullmatch(fields[1]) or int(fields[1]) > _MAX_SIZE:
        raise ErrorFormat(f'field 1 is not an unsigned 64-bit integer: {line}', line)
    return number, int(fields[1])


def convert_number_and_uid(line):
    """把 "1 DJzjbtr5hb2Lefq5Ass6eMjtEBV" 转换为 (1, 'DJzjbtr5hb2Lefq5Ass6eMjtEBV')"""
    fields = _split(line)
    return _to_number(fields[0], line), fields[1]


def _invalid(name, err):
    return ErrorFormat(f'{name} response is invalid: {err}', err.raw)


class POP3:
    """一个 POP3 连接上的客户端

    创建时读取服务器的问候语, 失败时抛出异常且不返回对象.
    同一时间只有一条命令在执行, 其他线程的调用会等待.
    strict 为 True 时, 在错误的会话阶段调用命令会在发送前抛出 ErrorState.
    """

    def __init__(self, sock, *, strict=None, encoding=None, dot_unstuff=None):
        config = Config.get_instance()
        self.strict = config['STRICT_STATE'] if strict is None else strict
        self._lock = threading.Lock()
        self._conn = Conn(sock, encoding=encoding, dot_unstuff=dot_unstuff)
        try:
            self.welcome = self._conn.read_response()
        except Exception:
            # socket 仍然属于调用方
            self._conn.close_files()
            raise
        self.state = SessionState.AUTHORIZATION
        log.debug('*welcome* %r', self.welcome)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def _check_state(self, verb):
        if self.strict and self.state not in ALLOWED_STATES[verb]:
            raise ErrorState(verb.value, self.state)

    # 发送一个命令后得到响应
    def _shortcmd(self, command, next_state=None):
        with self._lock:
            self._check_state(command.verb)
            self._conn.send(command)
            resp = self._conn.read_response()
            if next_state is not None:
                self.state = next_state
            return resp

    # 发送命令后得到较长的响应, 单行响应的文本被丢弃
    def _longcmd(self, command, join=False):
        with self._lock:
            self._check_state(command.verb)
            self._conn.send(command)
            self._conn.read_response()
            if join:
                return self._conn.read_to_period()
            return self._conn.read_lines()

    def _stat_or_list(self, name, command):
        msg = self._shortcmd(command)
        try:
            return convert_number_and_size(msg)
        except ErrorFormat as err:
            raise _invalid(name, err) from err

    def _listing(self, name, command, convert):
        lines = self._longcmd(command)
        try:
            return [convert(line) for line in lines]
        except ErrorFormat as err:
            raise _invalid(name, err) from err

    # 以下为公开方法

    def getwelcome(self):
        return self.welcome

    def user(self, user):
        self._shortcmd(Command.user(user))

    # 调用方负责先发送 USER
    def pass_(self, password):
        try:
            self._shortcmd(Command.pass_(password), next_state=SessionState.TRANSACTION)
        except ErrorResponse as err:
            log.warning('登录失败: %s', err)
            raise
        log.info('登录成功')

    def stat(self):
        """返回邮件数和邮箱大小"""
        return self._stat_or_list('STAT', Command.stat())

    def list(self, which):
        """返回指定邮件的 (编号, 大小)

        which 必须是 >= 1 的 int, 否则在发送前抛出 ValueError
        """
        return self._stat_or_list('LIST', Command.list_(which))

    def list_all(self):
        """返回所有邮件的 MessageInfo(number, size), 顺序与服务器一致"""
        def convert(line):
            number, size = convert_number_and_size(line)
            return MessageInfo(number, size=size)

        return self._listing('LIST', Command.list_(), convert)

    def retr(self, which):
        """取回邮件, 返回以 CRLF 连接的原始内容

        which 必须是 >= 1 的 int, 否则在发送前抛出 ValueError
        """
        return self._longcmd(Command.retr(which), join=True)

    def top(self, which, lines):
        """取回邮件头以及正文的前 lines 行"""
        return self._longcmd(Command.top(which, lines), join=True)

    def uidl(self, which):
        msg = self._shortcmd(Command.uidl(which))
        try:
            return convert_number_and_uid(msg)
        except ErrorFormat as err:
            raise _invalid('UIDL', err) from err

    def uidl_all(self):
        def convert(line):
            number, uid = convert_number_and_uid(line)
            return MessageInfo(number, uid=uid)

        return self._listing('UIDL', Command.uidl(), convert)

    def dele(self, which):
        """标记删除, QUIT 成功后才真正删除

        which 必须是 >= 1 的 int, 否则在发送前抛出 ValueError, 不会得到服务器的 -ERR
        """
        self._shortcmd(Command.dele(which))

    def noop(self):
        self._shortcmd(Command.noop())

    # 取消所有删除标记
    def rset(self):
        self._shortcmd(Command.rset())

    # 结束会话, 不关闭连接
    def quit(self):
        self._shortcmd(Command.quit(), next_state=SessionState.UPDATE)

    def upgrade(self, wrap):
        with self._lock:
            self._conn.upgrade(wrap)

    # 关闭后再调用命令会抛出 ErrorProto
    def close(self):
        with self._lock:
            log.debug('关闭连接')
            self._conn.close()


def _resolve_timeout(timeout):
    if timeout is None:
        timeout = Config.get_instance()['TIMEOUT']
    if timeout is None:
        return socket._GLOBAL_DEFAULT_TIMEOUT
    return timeout


def dial(host, port=None, timeout=None, ssl_context=None, **kwargs):
    """连接 POP3 服务器并返回 POP3 对象

    ssl_context 不为 None 时在连接后立即进行 TLS 握手
    """
    config = Config.get_instance()
    if port is None:
        port = config['POP3_PORT'] if ssl_context is None else config['POP3_SSL_PORT']

    sock = socket.create_connection((host, port), _resolve_timeout(timeout))
    log.info('连接 POP3 服务器 %s:%s', host, port)
    try:
        if ssl_context is not None:
            sock = ssl_context.wrap_socket(sock, server_hostname=host)
        return POP3(sock, **kwargs)
    except (ErrorProto, OSError):
        sock.close()
        raise


def dial_ssl(host, port=None, timeout=None, context=None, **kwargs):
    if context is None:
        context = ssl.create_default_context()
    return dial(host, port, timeout, ssl_context=context, **kwargs)
