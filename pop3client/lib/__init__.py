from pop3client.lib.pop_proto import Command, Conn, Reader, Writer, parse_response
from pop3client.lib.pop_client import POP3, dial, dial_ssl
