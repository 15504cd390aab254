import logging
import os

from lspconnector.categories import EndpointConfig, HOST_SUFFIX, PORT_SUFFIX
from lspconnector.support.mixins import CommonEqualityMixin

logger = logging.getLogger(__name__)

GENERIC_HOST_VAR = HOST_SUFFIX
GENERIC_PORT_VAR = PORT_SUFFIX


class ResolvedEndpoint(CommonEqualityMixin):
    """
    The TCP address of a language server.
    >>> str(ResolvedEndpoint('localhost', 5555))
    'localhost:5555'
    """
    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port

    def key(self):
        return str(self.host) + ':' + str(self.port)

    def __str__(self):
        return self.key()

    def __repr__(self):
        return 'ResolvedEndpoint(%r, %r)' % (self.host, self.port)


def parse_port(value):
    """
    Parses a port number, returning None when the value is not a usable port.
    Only plain decimal digits are accepted.
    >>> parse_port('9000')
    9000
    >>> parse_port(' 80 ')
    80
    >>> parse_port('notanumber') is None
    True
    >>> parse_port('70000') is None
    True
    >>> parse_port('1_000') is None
    True
    """
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    port = int(value)
    return port if 0 < port < 65536 else None


class EndpointResolver:
    """
    Computes the address of the language server for a category.
    Host and port are resolved independently, each taking the first of
     - the category specific variable, e.g. RUST_HOST
     - the generic variable, HOST
     - the compiled-in default
    The environment is read on every call.
    :param categories: mapping of category to EndpointConfig
    :param environ: the variables to resolve from. Defaults to the process environment.
    """
    def __init__(self, categories, environ=None):
        self.categories = categories
        self.environ = os.environ if environ is None else environ

    def _lookup(self, *names):
        """ the name and value of the first variable that is set to a non-blank value """
        for name in names:
            value = (self.environ.get(name) or '').strip()
            if value:
                return name, value
        return None, None

    def resolve_host(self, config: EndpointConfig):
        name, value = self._lookup(config.host_var, GENERIC_HOST_VAR)
        return value or config.default_host

    def resolve_port(self, config: EndpointConfig):
        name, value = self._lookup(config.port_var, GENERIC_PORT_VAR)
        if value is None:
            return config.default_port
        port = parse_port(value)
        if port is None:
            logger.warning("ignoring %s=%r for %s, using default port %d" %
                           (name, value, config.category, config.default_port))
            return config.default_port
        return port

    def resolve(self, category) -> ResolvedEndpoint:
        """
        Resolves the address for a known category. The category must be in the category table.
        """
        config = self.categories[category]
        return ResolvedEndpoint(self.resolve_host(config), self.resolve_port(config))
