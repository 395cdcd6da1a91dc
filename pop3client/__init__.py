from pop3client.lib import POP3, Command, Conn, dial, dial_ssl
from pop3client.models import (
    ErrorProto, ErrorEOF, ErrorFormat, ErrorResponse, ErrorState,
    MessageInfo, SessionState,
)

__version__ = '1.0.0'
