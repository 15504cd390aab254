import logging

from lspconnector.activation import ActivationSource, DocumentOpenedEvent, DocumentTracker, WorkspaceScanner
from lspconnector.broker import ConnectionBroker
from lspconnector.categories import load_categories
from lspconnector.endpoint import EndpointResolver

logger = logging.getLogger(__name__)


class BrokerService:
    """
    Connects an activation source to a connection broker.

    start() subscribes to the source, replays the documents already open so none are missed, then
    polls the source once.
    An opened document activates its category on the broker. Closing documents does not close sessions;
    sessions are closed together by stop().
    """
    def __init__(self, broker: ConnectionBroker, source: ActivationSource):
        self.broker = broker
        self.source = source
        self._started = False

    def start(self):
        """
        Starts forwarding activations to the broker. Starting a started service has no effect.
        A service cannot be restarted once stopped, since its broker no longer accepts activations.
        """
        if self._started:
            return
        if self.broker.stopped:
            raise ValueError("the broker service has been stopped and cannot be restarted")
        self._started = True
        self.source.listeners.add(self.activation_event)
        for event in self.source.active():
            self.activation_event(event)
        self.source.update()
        logger.info("broker service started for categories %s" % ', '.join(sorted(self.broker.categories)))

    def activation_event(self, event):
        """ receives document notifications from the activation source. """
        if isinstance(event, DocumentOpenedEvent):
            self.broker.on_category_activated(event.category, event.metadata)

    def update(self):
        """
        Polls the source and publishes the session events queued by the broker.
        """
        self.source.update()
        self.broker.update()

    def stop(self):
        """
        Stops listening to the source and closes all sessions.
        Returns once every session has finished closing. Calling stop() again has no effect.
        :return: the categories whose session raised an error on closing
        """
        self.source.listeners.remove(self.activation_event)
        failures = self.broker.shutdown()
        self.broker.update()
        if self._started:
            logger.info("broker service stopped")
        self._started = False
        return failures


def build_broker_service(config_directory=None, workspace=None, environ=None):
    """
    Builds a service from the built-in and configured categories.
    :param config_directory: where to look for configuration files, see load_categories
    :param workspace: when given, documents are discovered by scanning this directory. Otherwise
        the host reports them through the DocumentTracker returned as service.source
    :param environ: the variables endpoints are resolved from. Defaults to the process environment.
    """
    categories = load_categories(config_directory)
    broker = ConnectionBroker(categories, EndpointResolver(categories, environ))
    source = WorkspaceScanner(workspace, categories) if workspace else DocumentTracker(categories)
    return BrokerService(broker, source)
