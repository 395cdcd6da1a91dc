__all__ = ['ErrorProto', 'ErrorEOF', 'ErrorFormat', 'ErrorResponse', 'ErrorState']


# 本模块抛出的所有协议错误的基类
class ErrorProto(Exception):
    pass


# 服务器断开了连接
class ErrorEOF(ErrorProto):
    pass


class ErrorFormat(ErrorProto):
    """响应不符合 +OK/-ERR 格式, 或者响应内容无法按命令要求解析"""

    def __init__(self, message, raw=None):
        super().__init__(message)
        self.raw = raw


class ErrorResponse(ErrorProto):
    """服务器返回的 -ERR, message 为 -ERR 之后的文本 (可能为空)"""

    def __init__(self, message=''):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


# strict 模式下在错误的会话阶段发送命令
class ErrorState(ErrorProto):
    def __init__(self, command, state):
        super().__init__(f'{command} not allowed in {state.name} state')
        self.command = command
        self.state = state
