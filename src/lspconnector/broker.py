import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from lspconnector.endpoint import EndpointResolver
from lspconnector.session import Session, SessionState
from lspconnector.support.events import QueuedEventSource

logger = logging.getLogger(__name__)


class ConnectionBroker:
    """
    Keeps at most one session per category, created lazily the first time a category is activated.

    The sessions connect on their own threads. The session events they fire are queued and
    published on the thread calling update().

    A session that fails is kept, so the category stays unavailable for the life of the broker.
    After shutdown() the broker ignores further activations.

    :param categories: mapping of category to EndpointConfig. Only these categories are connected.
    :param resolver: resolves the endpoint for a category. Defaults to resolving from the process environment.
    :param session_factory: a callable (category, endpoint, events=) returning an unstarted Session
    """
    def __init__(self, categories, resolver=None, session_factory=Session, log=logger):
        self.categories = categories
        self.resolver = resolver if resolver is not None else EndpointResolver(categories)
        self.session_factory = session_factory
        self.events = QueuedEventSource()
        self.logger = log
        self._sessions = dict()     # a map from category to Session
        self._lock = threading.Lock()
        self._stopped = False

    def on_category_activated(self, category, metadata=None):
        """
        Notifies the broker that a document in the given category is in use.
        The first activation of a known category creates and starts its session; later activations
        return the existing session, whatever its state.
        :return: the session for the category, or None when the category is not known or the broker is stopped.
        """
        if category not in self.categories:
            self.logger.debug("ignoring activation of unknown category %s" % category)
            return None
        with self._lock:
            if self._stopped:
                self.logger.debug("broker stopped, ignoring activation of %s" % category)
                return None
            session = self._sessions.get(category)
            if session is not None:
                return session
            endpoint = self.resolver.resolve(category)
            session = self._sessions[category] = self.session_factory(category, endpoint, events=self.events)
            session.start()
        self.logger.info("connecting %s to %s %s" % (category, endpoint, metadata or ''))
        return session

    def session(self, category):
        with self._lock:
            return self._sessions.get(category)

    @property
    def sessions(self):
        """ a copy of the mapping from category to session """
        with self._lock:
            return dict(self._sessions)

    @property
    def stopped(self):
        return self._stopped

    def available(self, category):
        """ Determines if the session for the category is connected. """
        session = self.session(category)
        return session is not None and session.available

    def unavailable_categories(self):
        """ the categories whose session failed to connect """
        return sorted(category for category, session in self.sessions.items()
                      if session.state is SessionState.FAILED)

    def shutdown(self):
        """
        Closes every session and waits for all of them to finish closing.
        A session that fails to close is logged and does not stop the others from closing.
        :return: the categories whose session raised an error on closing
        """
        with self._lock:
            self._stopped = True
            sessions = dict(self._sessions)
        if not sessions:
            return []

        failures = []
        with ThreadPoolExecutor(max_workers=len(sessions), thread_name_prefix='session-close') as executor:
            closing = {executor.submit(session.close): category for category, session in sessions.items()}
            for future in as_completed(closing):
                category = closing[future]
                try:
                    future.result()
                except Exception as e:
                    self.logger.exception("error closing session %s: %s" % (category, e))
                    failures.append(category)

        with self._lock:
            for category, session in sessions.items():
                if self._sessions.get(category) is session:
                    del self._sessions[category]
        self.logger.info("closed %d sessions" % len(sessions))
        return sorted(failures)

    def update(self):
        """ publishes the session events queued since the last update on the calling thread. """
        self.events.publish()
