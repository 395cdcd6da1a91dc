"""Pytest configuration for pop3client tests."""

import io

import pytest

from pop3client.basic import Config
from pop3client.lib.pop_client import POP3

GREETING = '+OK hello from popgate(2.35.25)\n'


def crlf(text):
    """Convert a test transcript written with \\n into wire format."""
    return '\r\n'.join(text.split('\n')).encode('UTF-8')


class _Recorder(io.BytesIO):
    """A write file that keeps its contents after close()."""

    def close(self):
        self.final = self.getvalue()
        super().close()

    def text(self):
        if self.closed:
            return self.final.decode('UTF-8')
        return self.getvalue().decode('UTF-8')


class FakeSocket:
    """Socket stand-in that replays a scripted server transcript."""

    def __init__(self, data):
        self.rfile = io.BytesIO(data)
        self.wfile = _Recorder()
        self.closed = False
        self.shutdown_called = False

    def makefile(self, mode):
        if 'r' in mode:
            return self.rfile
        return self.wfile

    def shutdown(self, how):
        self.shutdown_called = True

    def close(self):
        self.closed = True

    @property
    def sent(self):
        return self.wfile.text()


def pytest_collection_modifyitems(config, items):
    """Add markers automatically based on location."""
    for item in items:
        test_path = str(item.fspath)
        if "unit_tests" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "integration_tests" in test_path:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def reset_config():
    Config.reset()
    yield
    Config.reset()


@pytest.fixture
def make_socket():
    def factory(server):
        return FakeSocket(crlf(server))

    return factory


@pytest.fixture
def make_client(make_socket):
    """Build a POP3 client whose server side is the given transcript."""

    def factory(server, **kwargs):
        sock = make_socket(GREETING + server)
        return POP3(sock, **kwargs), sock

    return factory
