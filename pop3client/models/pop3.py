import collections
import enum

__all__ = ['MessageInfo', 'SessionState', 'ALLOWED_STATES', 'Verb']


# LIST 得到的条目只有 size, UIDL 得到的条目只有 uid
MessageInfo = collections.namedtuple('MessageInfo', ['number', 'size', 'uid'])
MessageInfo.__new__.__defaults__ = (None, None)


class Verb(enum.Enum):
    USER = 'USER'
    PASS = 'PASS'
    STAT = 'STAT'
    LIST = 'LIST'
    RETR = 'RETR'
    DELE = 'DELE'
    NOOP = 'NOOP'
    RSET = 'RSET'
    QUIT = 'QUIT'
    UIDL = 'UIDL'
    TOP = 'TOP'


class SessionState(enum.Enum):
    """RFC 1939 中定义的会话阶段"""
    AUTHORIZATION = 1
    TRANSACTION = 2
    UPDATE = 3


# 每个命令可以发送的阶段
ALLOWED_STATES = {
    Verb.USER: {SessionState.AUTHORIZATION},
    Verb.PASS: {SessionState.AUTHORIZATION},
    Verb.QUIT: {SessionState.AUTHORIZATION, SessionState.TRANSACTION},
    Verb.STAT: {SessionState.TRANSACTION},
    Verb.LIST: {SessionState.TRANSACTION},
    Verb.RETR: {SessionState.TRANSACTION},
    Verb.DELE: {SessionState.TRANSACTION},
    Verb.NOOP: {SessionState.TRANSACTION},
    Verb.RSET: {SessionState.TRANSACTION},
    Verb.UIDL: {SessionState.TRANSACTION},
    Verb.TOP: {SessionState.TRANSACTION},
}
