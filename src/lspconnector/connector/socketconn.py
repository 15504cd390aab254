import logging
import socket

from lspconnector.conduit.base import Conduit
from lspconnector.conduit.socket_conduit import SocketConduit
from lspconnector.connector.base import AbstractConnector, ConnectorError

logger = logging.getLogger(__name__)


class SocketConnector(AbstractConnector):
    """
    A connector that communicates data via a TCP socket.
    """
    def __init__(self, host, port, timeout=None):
        """
        :param host: the host name or address of the server
        :param port: the TCP port of the server
        :param timeout: seconds allowed for establishing the connection. None leaves the
            deadline to the operating system.
        """
        super().__init__()
        self._connect_args = (host, port)
        self._timeout = timeout

    @property
    def endpoint(self):
        return self._connect_args

    def _connect(self) -> Conduit:
        try:
            sock = socket.create_connection(self._connect_args, timeout=self._timeout)
            sock.settimeout(None)
            logger.info("opened socket to %s:%s" % self._connect_args)
            return SocketConduit(sock)
        except OSError as e:
            logger.warning("error opening socket to %s:%s: %s" % (self._connect_args + (e,)))
            raise ConnectorError("unable to connect to %s:%s" % self._connect_args) from e

    def _disconnect(self):
        pass
