import errno
import socket

from pop3client.basic import Config, get_logger
from pop3client.models.errors import ErrorProto, ErrorEOF, ErrorFormat, ErrorResponse
from pop3client.models.pop3 import Verb

__all__ = ['Command', 'Reader', 'Writer', 'Conn', 'parse_response', 'CRLF']

log = get_logger(__name__)

# 定义行结束符 (为了接受出 CRLF 的结束符, 所以分开定义)
CR = b'\r'
LF = b'\n'
CRLF = CR + LF

# 多行响应的结束行
PERIOD = '.'

_FORBIDDEN = ('\r', '\n', '\0')


def _number(value, minimum=1):
    # bool 是 int 的子类, 需要单独排除
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f'message number must be an int, got {value!r}')
    if value < minimum:
        raise ValueError(f'message number must be >= {minimum}, got {value}')
    return value


def _text(value):
    if not isinstance(value, str) or not value:
        raise ValueError(f'argument must be a non-empty str, got {value!r}')
    if any(c in value for c in _FORBIDDEN):
        raise ValueError('argument must not contain CR, LF or NUL')
    return value


class Command:
    """一条 POP3 命令, 只能通过各个命令的构造方法创建"""
    __slots__ = ('verb', 'args')

    def __init__(self, verb, *args):
        self.verb = verb
        self.args = args

    def line(self):
        return ' '.join([self.verb.value] + [str(a) for a in self.args])

    def __str__(self):
        # 不在日志中输出密码
        if self.verb is Verb.PASS:
            return 'PASS ****'
        return self.line()

    def __repr__(self):
        return f'<Command {self}>'

    def __eq__(self, other):
        if not isinstance(other, Command):
            return NotImplemented
        return self.verb is other.verb and self.args == other.args

    __hash__ = None

    @classmethod
    def user(cls, name):
        return cls(Verb.USER, _text(name))

    @classmethod
    def pass_(cls, password):
        return cls(Verb.PASS, _text(password))

    @classmethod
    def stat(cls):
        return cls(Verb.STAT)

    @classmethod
    def list_(cls, which=None):
        if which is None:
            return cls(Verb.LIST)
        return cls(Verb.LIST, _number(which))

    @classmethod
    def retr(cls, which):
        return cls(Verb.RETR, _number(which))

    @classmethod
    def top(cls, which, lines):
        return cls(Verb.TOP, _number(which), _number(lines, minimum=0))

    @classmethod
    def dele(cls, which):
        return cls(Verb.DELE, _number(which))

    @classmethod
    def noop(cls):
        return cls(Verb.NOOP)

    @classmethod
    def rset(cls):
        return cls(Verb.RSET)

    @classmethod
    def quit(cls):
        return cls(Verb.QUIT)

    @classmethod
    def uidl(cls, which=None):
        if which is None:
            return cls(Verb.UIDL)
        return cls(Verb.UIDL, _number(which))


def parse_response(line):
    """判断一行响应是 +OK 还是 -ERR

    +OK 返回空格之后的文本, -ERR 抛出 ErrorResponse,
    没有空格或者状态不明时抛出 ErrorFormat
    """
    index = line.find(' ')
    if index < 0:
        raise ErrorFormat(f'malformed response: {line}', line)

    status = line[:index].upper()
    if status == '+OK':
        return line[index + 1:]
    if status == '-ERR':
        raise ErrorResponse(line[index + 1:])
    raise ErrorFormat(f'unknown response: {line}', line)


class Reader:
    def __init__(self, file, encoding='UTF-8', dot_unstuff=False):
        self.file = file
        self.encoding = encoding
        self.dot_unstuff = dot_unstuff

    # 从服务中读取一行, 并且剔除 CRLF
    # 不限制行的长度, 邮件正文中的行可能很长
    def read_line(self):
        line = self.file.readline()
        # 表示断开连接
        if not line:
            raise ErrorEOF('connection closed by server')

        if line[-2:] == CRLF:
            line = line[:-2]
        elif line[-1:] == LF:
            line = line[:-1]

        line = line.decode(self.encoding, 'surrogateescape')
        log.debug('*get* %r', line)
        return line

    # 读取到只有 "." 的一行为止, 返回值不包含 "."
    def read_lines(self):
        lines = []
        while True:
            line = self.read_line()
            if line == PERIOD:
                return lines
            if self.dot_unstuff and line.startswith('..'):
                line = line[1:]
            lines.append(line)

    def read_to_period(self):
        return '\r\n'.join(self.read_lines())

    def read_response(self):
        return parse_response(self.read_line())


class Writer:
    def __init__(self, file, encoding='UTF-8'):
        self.file = file
        self.encoding = encoding

    def write_line(self, line):
        self.file.write(line.encode(self.encoding) + CRLF)
        self.file.flush()


class Conn:
    """持有一个 socket 以及绑定在它上面的 Reader 和 Writer

    Reader 和 Writer 不对外公开, 所有读写都经过 Conn
    """

    def __init__(self, sock, *, encoding=None, dot_unstuff=None):
        config = Config.get_instance()
        self.encoding = encoding or config['ENCODING']
        self.dot_unstuff = config['DOT_UNSTUFF'] if dot_unstuff is None else dot_unstuff
        self.sock = sock
        self._reader = None
        self._writer = None
        self._make_files()

    def _make_files(self):
        self._reader = Reader(self.sock.makefile('rb'), self.encoding, self.dot_unstuff)
        self._writer = Writer(self.sock.makefile('wb'), self.encoding)

    def close_files(self):
        reader, writer = self._reader, self._writer
        self._reader = self._writer = None
        try:
            if reader is not None:
                reader.file.close()
        finally:
            if writer is not None:
                writer.file.close()

    def _check_open(self):
        if self._reader is None:
            raise ErrorProto('connection closed')

    # 发送 POP3 命令
    def send(self, command):
        self._check_open()
        log.debug('*cmd* %s', command)
        self._writer.write_line(command.line())

    def read_lines(self):
        self._check_open()
        return self._reader.read_lines()

    def read_to_period(self):
        self._check_open()
        return self._reader.read_to_period()

    def read_response(self):
        self._check_open()
        return self._reader.read_response()

    def upgrade(self, wrap):
        """把 socket 换成 wrap(socket) 的返回值, 例如 TLS 包装后的 socket

        不会发送 STLS 命令, 由调用方负责
        """
        self._check_open()
        self.close_files()
        self.sock = wrap(self.sock)
        self._make_files()

    # 在不做任何准备的情况下关闭连接
    def close(self):
        try:
            self.close_files()
        finally:
            sock = self.sock
            self.sock = None
            if sock is not None:
                try:
                    sock.shutdown(socket.SHUT_RDWR)
                except OSError as exc:
                    if (exc.errno != errno.ENOTCONN
                            and getattr(exc, 'winerror', 0) != 10022):
                        raise
                finally:
                    sock.close()
