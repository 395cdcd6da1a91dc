from pop3client.basic.config import Config
from pop3client.basic.logger import get_logger
