"""
A session is one connection to the language server of one category.

The connection is made on a background thread so that a slow or unreachable server does not hold up
the caller. The outcome is delivered through a future as a ConnectionResult, never as an exception.

    CONNECTING -> ACTIVE -> CLOSED
    CONNECTING -> FAILED
    CONNECTING -> CLOSED

A failed session stays failed. Nothing here retries.
"""
import logging
import threading
from concurrent.futures import Future
from enum import Enum

from lspconnector.connector.base import ConnectorError, SessionNotActiveError
from lspconnector.connector.socketconn import SocketConnector
from lspconnector.endpoint import ResolvedEndpoint
from lspconnector.support.events import EventSource
from lspconnector.support.mixins import CommonEqualityMixin

logger = logging.getLogger(__name__)


class SessionState(Enum):
    CONNECTING = 'connecting'
    ACTIVE = 'active'
    FAILED = 'failed'
    CLOSED = 'closed'


class ConnectionResult(CommonEqualityMixin):
    """ The outcome of a connection attempt. """
    succeeded = False

    def __init__(self, endpoint: ResolvedEndpoint):
        self.endpoint = endpoint


class ConnectionSucceeded(ConnectionResult):
    """ The server accepted the connection. """
    succeeded = True


class ConnectionFailed(ConnectionResult):
    """ The connection could not be established. error is the exception raised by the attempt. """

    def __init__(self, endpoint: ResolvedEndpoint, error: BaseException):
        super().__init__(endpoint)
        self.error = error


class SessionEvent:
    """ base class for session events. """
    def __init__(self, session):
        self.session = session

    @property
    def category(self):
        return self.session.category


class SessionActiveEvent(SessionEvent):
    """ The session connected to its server. """


class SessionFailedEvent(SessionEvent):
    """ The session could not connect to its server. """


class SessionClosedEvent(SessionEvent):
    """ The session was closed. """


def socket_connector(endpoint: ResolvedEndpoint):
    return SocketConnector(endpoint.host, endpoint.port)


class Session:
    """
    Connects to the server at endpoint and owns the resulting conduit.
    Use Session.open() to create a session and start connecting.

    :param category: the category this session serves
    :param endpoint: the address of the server
    :param connector_factory: a callable given the endpoint that returns an unconnected Connector
    :param events: event source receiving the SessionEvent instances for this session
    """

    def __init__(self, category, endpoint: ResolvedEndpoint, connector_factory=socket_connector,
                 events=None, log=logger):
        self.category = category
        self.endpoint = endpoint
        self.events = events if events is not None else EventSource()
        self.future = Future()
        self.background_thread = None
        self.logger = log
        self._connector_factory = connector_factory
        self._connector = None
        self._state = SessionState.CONNECTING
        self._error = None
        self._lock = threading.Lock()
        # held while a transition settles the future and fires its event
        self._transition = threading.RLock()

    @classmethod
    def open(cls, category, endpoint, connector_factory=socket_connector, events=None):
        """ creates a session and starts connecting. Returns without waiting for the connection. """
        session = cls(category, endpoint, connector_factory, events)
        session.start()
        return session

    def start(self):
        """ starts the connection attempt on a daemon thread. Subsequent calls have no effect. """
        with self._lock:
            if self.background_thread is not None:
                return
            t = threading.Thread(target=self._run, name='session-%s' % self.category)
            t.daemon = True
            self.background_thread = t
        t.start()

    def _run(self):
        connector = None
        try:
            connector = self._connector_factory(self.endpoint)
            connector.connect()
        except Exception as e:
            if connector is not None:
                self._release(connector)
            self._failed(e)
        else:
            self._connected(connector)

    def _connected(self, connector):
        with self._transition:
            with self._lock:
                closed = self._state is not SessionState.CONNECTING
                if not closed:
                    self._connector = connector
                    self._state = SessionState.ACTIVE
            if closed:
                self.logger.info("session %s closed while connecting, releasing connection to %s" %
                                 (self.category, self.endpoint))
                self._release(connector)
                return
            self.logger.info("session %s connected to %s" % (self.category, self.endpoint))
            self._settle(ConnectionSucceeded(self.endpoint))
            self.events.fire(SessionActiveEvent(self))

    def _failed(self, error):
        with self._transition:
            with self._lock:
                closed = self._state is not SessionState.CONNECTING
                if not closed:
                    self._state = SessionState.FAILED
                    self._error = error
            if closed:
                self.logger.debug("session %s closed while connecting, then failed: %s" % (self.category, error))
                return
            self.logger.warning("session %s failed to connect to %s: %s" % (self.category, self.endpoint, error))
            self._settle(ConnectionFailed(self.endpoint, error))
            self.events.fire(SessionFailedEvent(self))

    def _release(self, connector):
        try:
            connector.disconnect()
        except Exception as e:
            self.logger.exception("error releasing connection for %s: %s" % (self.category, e))

    def _settle(self, result: ConnectionResult):
        with self._lock:
            if self.future.done():
                return
            self.future.set_result(result)

    def close(self):
        """
        Closes the session, releasing the stream. Closing a closed or failed session has no effect.
        A session closed while connecting stays closed, and the connection is released when the attempt completes.
        A close that arrives while the session is becoming active or failed waits until those events are fired,
        so listeners always see the closed event last.
        """
        with self._transition:
            with self._lock:
                previous = self._state
                if previous in (SessionState.CLOSED, SessionState.FAILED):
                    return
                self._state = SessionState.CLOSED
                connector, self._connector = self._connector, None
            if previous is SessionState.CONNECTING:
                self._settle(ConnectionFailed(self.endpoint, ConnectorError("session closed while connecting")))
            try:
                if connector is not None:
                    connector.disconnect()
            finally:
                self.logger.info("session %s closed" % self.category)
                self.events.fire(SessionClosedEvent(self))

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def available(self) -> bool:
        """ True when the stream can be used. """
        return self._state is SessionState.ACTIVE

    @property
    def error(self):
        """ the exception that caused the session to fail, or None """
        return self._error

    def result(self, timeout=None) -> ConnectionResult:
        """
        Waits for the connection attempt to finish.
        raises concurrent.futures.TimeoutError when timeout passes first.
        """
        return self.future.result(timeout)

    def wait(self, timeout=None) -> SessionState:
        self.result(timeout)
        return self.state

    @property
    def conduit(self):
        """
        The conduit to the server. raises SessionNotActiveError unless the session is active.
        """
        with self._lock:
            if self._state is not SessionState.ACTIVE:
                raise SessionNotActiveError("session %s is %s" % (self.category, self._state.value))
            connector = self._connector
        return connector.conduit

    @property
    def reader(self):
        """ the readable side of the stream """
        return self.conduit.input

    @property
    def writer(self):
        """ the writable side of the stream """
        return self.conduit.output

    def __repr__(self):
        return 'Session(%r, %s, %s)' % (self.category, self.endpoint, self._state.value)
