from pop3client.models.errors import ErrorProto, ErrorEOF, ErrorFormat, ErrorResponse, ErrorState
from pop3client.models.pop3 import MessageInfo, SessionState, ALLOWED_STATES, Verb
