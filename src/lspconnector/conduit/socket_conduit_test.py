import socket
import sys
import threading
import unittest
from io import BytesIO

import timeout_decorator
from hamcrest import assert_that, is_

from lspconnector.conduit.base import Conduit
from lspconnector.conduit.socket_conduit import SocketConduit

server_host = '127.0.0.1'


def debug_timeout(value):
    """
    Replaces the timeout value with a very large one if the tests are running under a debugger.
    This prevents the main thread from throwing an exception and exiting when the test times out
    due to a breakpoint.
    """
    return value if sys.gettrace() is None else 100000


class EchoServer:
    """
    Listens on an ephemeral local port and echoes back whatever each client sends.
    """
    def __init__(self, host=server_host):
        s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        s.bind((host, 0))
        s.listen(5)
        self.sock = s
        self.host = host
        self.port = s.getsockname()[1]
        self.clients = []
        self.thread = threading.Thread(target=self._serve, daemon=True)
        self.thread.start()

    def _serve(self):
        while True:
            try:
                client, address = self.sock.accept()
            except OSError:
                return
            self.clients.append(client)
            threading.Thread(target=self._echo, args=(client,), daemon=True).start()

    @staticmethod
    def _echo(client):
        try:
            while True:
                data = client.recv(1024)
                if not data:
                    break
                client.sendall(data)
        except OSError:
            pass
        finally:
            client.close()

    def close(self):
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()
        self.thread.join(1)


def unused_port(host=server_host):
    """ a local port that nothing listens on """
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind((host, 0))
    port = s.getsockname()[1]
    s.close()
    return port


class BytesConduit(Conduit):
    """ a conduit over a pair of in-memory streams, standing in for a socket in tests """

    def __init__(self, read=b'', target=None):
        self._read = BytesIO(read)
        self._write = BytesIO()
        self._target = target

    @property
    def target(self):
        return self._target

    @property
    def input(self):
        return self._read

    @property
    def output(self):
        return self._write

    @property
    def open(self) -> bool:
        return not self._read.closed

    def close(self):
        self._read.close()
        self._write.close()


class SocketConduitTest(unittest.TestCase):
    """ functional test for the socket conduit, run against a local echo server. """

    def setUp(self):
        self.server = EchoServer()
        self.addCleanup(self.server.close)
        self.sock = socket.create_connection((self.server.host, self.server.port))
        self.sut = SocketConduit(self.sock)
        self.addCleanup(self.sut.close)

    @timeout_decorator.timeout(debug_timeout(5))
    def test_write_then_read(self):
        self.sut.output.write(b"hello")
        assert_that(self.sut.input.read(5), is_(b"hello"))

    def test_target_is_socket(self):
        assert_that(self.sut.target, is_(self.sock))
        self.sut.close()

    def test_open_until_closed(self):
        assert_that(self.sut.open, is_(True))
        self.sut.close()
        assert_that(self.sut.open, is_(False))
        assert_that(self.sut.input.closed, is_(True))
        assert_that(self.sut.output.closed, is_(True))

    def test_close_twice(self):
        self.sut.close()
        self.sut.close()
        assert_that(self.sut.open, is_(False))

    @timeout_decorator.timeout(debug_timeout(5))
    def test_peer_closed(self):
        self.server.close()
        for client in list(self.server.clients):
            client.close()
        self.sut.close()

