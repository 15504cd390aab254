import socket

from lspconnector.conduit import base


class SocketConduit(base.Conduit):
    """
    A conduit that provides communication via a connected TCP socket.
    The input and output streams are unbuffered-on-write binary files over the socket.
    :param sock The open, connected socket
    """
    def __init__(self, sock: socket.socket):
        """
        :param sock: the client socket that represents the connection
        :type sock: socket
        """
        self.sock = sock
        self.read = sock.makefile('rb')
        self.write = sock.makefile('wb', buffering=0)
        self._closed = False

    @property
    def open(self) -> bool:
        return not self._closed and self.sock.fileno() >= 0

    @property
    def target(self):
        return self.sock

    @property
    def output(self):
        return self.write

    @property
    def input(self):
        return self.read

    def close(self):
        if self._closed:
            return
        self._closed = True
        self.read.close()
        self.write.close()
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass    # the peer may have closed the socket
        finally:
            self.sock.close()
