"""
    Activation sources report the documents in use by the editor, and so which categories need a
    language server. A DocumentOpenedEvent is fired for each document opened, and a
    DocumentClosedEvent when it is no longer in use.

    active() replays the documents currently open, so a listener added late can catch up.
"""

import logging
import os
import threading
from urllib.parse import urlparse

from lspconnector.categories import category_for_path
from lspconnector.support.events import EventSource
from lspconnector.support.mixins import CommonEqualityMixin

logger = logging.getLogger(__name__)


class DocumentEvent(CommonEqualityMixin):
    """ Notification about a document. """
    def __init__(self, source, key, category, metadata=None):
        """
        :param source   The ActivationSource that posted this event
        :param key      An identifier for the document, such as its uri or path
        :param category The category of the document
        :param metadata Any further details known about the document
        """
        self.source = source
        self.key = key
        self.category = category
        self.metadata = metadata or {}


class DocumentOpenedEvent(DocumentEvent):
    """ Signifies that a document is in use. """


class DocumentClosedEvent(DocumentEvent):
    """ Signifies that a document is no longer in use. """


class ActivationSource:
    """ Reports documents as they are opened and closed. """
    def __init__(self):
        self.listeners = EventSource()

    def active(self):
        """ a DocumentOpenedEvent for each document currently open """
        return []

    def update(self):
        """ template method for sources that must be polled """


class DocumentTracker(ActivationSource):
    """
    Tracks the documents the host reports as open. Safe to call from any thread;
    events are fired on the calling thread.

    :param categories: mapping of category to EndpointConfig, used to drop documents
        whose uri scheme is not served by the category
    """
    def __init__(self, categories=None):
        super().__init__()
        self.categories = categories or {}
        self._documents = {}    # uri to DocumentOpenedEvent
        self._lock = threading.Lock()

    @staticmethod
    def scheme(uri):
        """
        >>> DocumentTracker.scheme('untitled:Untitled-1')
        'untitled'
        >>> DocumentTracker.scheme('/home/me/main.rs')
        'file'
        """
        return urlparse(uri).scheme or 'file'

    def opened(self, uri, category, **metadata):
        """
        Records a document as open and notifies the listeners.
        :return: the event fired, or None if the document was dropped
        """
        scheme = self.scheme(uri)
        config = self.categories.get(category)
        if config is not None and not config.accepts_scheme(scheme):
            logger.debug("ignoring %s document %s with scheme %s" % (category, uri, scheme))
            return None
        metadata.setdefault('scheme', scheme)
        event = DocumentOpenedEvent(self, uri, category, metadata)
        with self._lock:
            self._documents[uri] = event
        self.listeners.fire(event)
        return event

    def closed(self, uri):
        with self._lock:
            opened = self._documents.pop(uri, None)
        if opened is None:
            return None
        event = DocumentClosedEvent(self, uri, opened.category, opened.metadata)
        self.listeners.fire(event)
        return event

    def active(self):
        with self._lock:
            return list(self._documents.values())


class PolledActivationSource(ActivationSource):
    """
    Determines the documents opened and closed in response to calling update()
    """

    def __init__(self):
        super().__init__()
        self.previous = {}      # the previous known documents, key to category

    def _is_allowed(self, key, category):
        """
        Template method to allow subclasses to exclude documents.
        """
        return True

    def _changed_events(self, available: dict) -> list:
        """
        Computes which documents have been added, removed or changed category.
        :param available: dictionary of document key to category
        :return: returns a list of events to send
        """
        # any key only in previous maps to None, so has been removed
        current_documents = {p: None for p in self.previous}
        current_documents.update(available)

        events = []
        for key, current in sorted(current_documents.items()):
            previous = self.previous.get(key, None)
            if current != previous:
                not previous or events.append(DocumentClosedEvent(self, key, previous, self._metadata(key)))
                not current or events.append(DocumentOpenedEvent(self, key, current, self._metadata(key)))
        return events

    def _metadata(self, key):
        return {}

    def _fetch_available(self):
        """ Template method for subclasses to determine the current
            documents.
        :return: a dictionary of document key to category.
        """
        return {}

    def _filter_available(self, available: dict):
        return {k: v for k, v in available.items() if self._is_allowed(k, v)}

    def _update(self, available: dict):
        events = self._changed_events(available)
        self.previous = available
        self.listeners.fire_all(events)

    def update(self):
        available = self._fetch_available()
        available = self._filter_available(available)
        self._update(available)

    def active(self):
        return [DocumentOpenedEvent(self, key, category, self._metadata(key))
                for key, category in sorted(self.previous.items())]


class WorkspaceScanner(PolledActivationSource):
    """
    Scans a directory tree for files of the known categories. Each file is a document; it opens when
    it first appears in a scan and closes when it is gone.

    :param root: the directory to scan
    :param categories: mapping of category to EndpointConfig. The extensions of each category select its files.
    :param excluded: directory names that are not descended into
    """
    default_excluded = ('.git', '.hg', '.svn', 'node_modules', 'target', '__pycache__')

    def __init__(self, root, categories, excluded=default_excluded):
        super().__init__()
        self.root = root
        self.categories = categories
        self.excluded = set(excluded)

    def _metadata(self, key):
        return {'path': key}

    def _fetch_available(self):
        found = {}
        for directory, subdirs, files in os.walk(self.root):
            subdirs[:] = [d for d in subdirs if d not in self.excluded]
            for name in files:
                path = os.path.join(directory, name)
                category = category_for_path(self.categories, path)
                if category is not None:
                    found[path] = category
        return found

    def update(self):
        super().update()
        logger.debug("scanned %s: %d documents" % (self.root, len(self.previous)))
