from abc import abstractmethod

from lspconnector.conduit.base import Conduit


class ConnectorError(Exception):
    """ Indicates an error condition with a connection. """


class ConnectionNotConnectedError(ConnectorError):
    """ A conduit was requested from a connector that is not connected. """


class SessionNotActiveError(ConnectionNotConnectedError):
    """ The streams of a session were requested before it became active, or after it failed or closed. """


class Connector:
    """ Opens a conduit to one endpoint. """

    @property
    @abstractmethod
    def endpoint(self):
        """ the address this connector dials """
        raise NotImplementedError

    @property
    @abstractmethod
    def connected(self) -> bool:
        """ True when the conduit is open. """
        raise NotImplementedError

    @property
    @abstractmethod
    def conduit(self) -> Conduit:
        """
        The open conduit. raises ConnectionNotConnectedError when not connected.
        """
        raise ConnectionNotConnectedError

    @abstractmethod
    def connect(self):
        """
        Opens the conduit. Returns silently when already connected.
        Raises ConnectorError if the connection cannot be established.
        """
        raise NotImplementedError

    @abstractmethod
    def disconnect(self):
        """ Closes the conduit, if open. """
        raise NotImplementedError


class AbstractConnector(Connector):
    """ Manages the connection cycle to an endpoint."""

    def __init__(self):
        super().__init__()
        self._conduit = None

    @property
    def connected(self):
        return self._conduit is not None and self._connected()

    def connect(self):
        if self.connected:
            return

        try:
            self._conduit = self._connect()
        finally:
            if not self._conduit:
                self.disconnect()

    def disconnect(self):
        if self._conduit is None:
            return
        self._disconnect()
        self._conduit.close()
        self._conduit = None

    @abstractmethod
    def _connect(self) -> Conduit:
        """ Template method for subclasses to perform the connection.
            If connection is not possible, an exception should be thrown
        """
        raise NotImplementedError

    @abstractmethod
    def _disconnect(self):
        """ perform any actions needed on disconnection.
        The base class takes care of disposing the conduit, which happens
        after this method has been called.
        """
        raise NotImplementedError

    def _connected(self):
        return self._conduit is not None and self._conduit.open

    @property
    def conduit(self) -> Conduit:
        """
        Retrieves the conduit for this connection.
        raises ConnectionNotConnectedError if not connected
        """
        self.check_connected()
        return self._conduit

    def check_connected(self):
        if not self.connected:
            raise ConnectionNotConnectedError(self.endpoint)
