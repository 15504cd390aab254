"""
The table of known categories. Each category is served by one language server, and
described by an EndpointConfig that names the environment variables overriding its
address and the compiled-in default address.

The built-in table can be extended or overridden by configuration files, see load_categories.
"""
import logging
import os
import re

from configobj import ConfigObjError

from lspconnector.config.config import load_config
from lspconnector.support.mixins import CommonEqualityMixin, StringerMixin

logger = logging.getLogger(__name__)

HOST_SUFFIX = 'HOST'
PORT_SUFFIX = 'PORT'

config_name = 'lspconnector'
schema_directory = os.path.join(os.path.dirname(__file__), 'config')


def env_var_name(category, suffix):
    """
    The name of a category specific environment variable.
    >>> env_var_name('rust', 'HOST')
    'RUST_HOST'
    >>> env_var_name('c++', 'PORT')
    'C___PORT'
    """
    return re.sub(r'[^A-Za-z0-9]', '_', category).upper() + '_' + suffix


class EndpointConfig(CommonEqualityMixin, StringerMixin):
    """
    Static description of how to reach the language server for one category.
    :param category: the category identifier, e.g. 'rust'
    :param default_host: the host used when no environment variable overrides it
    :param default_port: the port used when no environment variable overrides it
    :param host_var: the category specific host variable. Derived from the category when not given.
    :param port_var: the category specific port variable. Derived from the category when not given.
    :param extensions: file name extensions of documents in this category
    :param client_id: identifier of the client session, for the protocol layer
    :param name: human readable name of the server
    :param scheme: the document uri scheme served by this category
    """
    def __init__(self, category, default_host, default_port, host_var=None, port_var=None,
                 extensions=(), client_id=None, name=None, scheme='file'):
        self.category = category
        self.default_host = default_host
        self.default_port = int(default_port)
        self.host_var = host_var or env_var_name(category, HOST_SUFFIX)
        self.port_var = port_var or env_var_name(category, PORT_SUFFIX)
        self.extensions = tuple(extensions)
        self.client_id = client_id or category + 'LspConnector'
        self.name = name or 'External %s Language Server (TCP)' % category.capitalize()
        self.scheme = scheme

    def accepts_scheme(self, scheme):
        return scheme is None or self.scheme is None or scheme == self.scheme


BUILTIN_CATEGORIES = {
    'rust': EndpointConfig('rust', 'language-server', 5555, extensions=('.rs',),
                           client_id='rustLspConnector', name='External Rust Language Server (TCP)'),
    'java': EndpointConfig('java', 'language-server', 5556, extensions=('.java',),
                           client_id='javaLspConnector', name='External Java Language Server (TCP)'),
}


def file_patterns(categories, category):
    """
    The file name extensions for a category. Unknown categories have none.
    >>> file_patterns(BUILTIN_CATEGORIES, 'rust')
    ('.rs',)
    >>> file_patterns(BUILTIN_CATEGORIES, 'cobol')
    ()
    """
    config = categories.get(category)
    return config.extensions if config is not None else ()


def category_for_path(categories, path):
    """
    Finds the category whose extensions match the given file name.
    >>> category_for_path(BUILTIN_CATEGORIES, '/src/main.rs')
    'rust'
    >>> category_for_path(BUILTIN_CATEGORIES, 'README.md') is None
    True
    """
    name = os.path.basename(path).lower()
    for category, config in sorted(categories.items()):
        if any(name.endswith(ext.lower()) for ext in config.extensions):
            return category
    return None


def _merge_section(category, section, base):
    values = {k: v for k, v in section.items() if v is not None}
    if base is None:
        if 'port' not in values:
            raise ConfigObjError("category %s does not define a port" % category)
        base = EndpointConfig(category, 'localhost', values['port'])
    return EndpointConfig(category,
                          values.get('host', base.default_host),
                          values.get('port', base.default_port),
                          host_var=values.get('host_var', base.host_var),
                          port_var=values.get('port_var', base.port_var),
                          extensions=values.get('extensions', base.extensions),
                          client_id=values.get('client_id', base.client_id),
                          name=values.get('name', base.name),
                          scheme=values.get('scheme', base.scheme))


def load_categories(directory=None, name=config_name, builtin=None):
    """
    Builds the category table from the built-in categories and any configuration files.
    Sections in the configuration files are categories; values given there replace the built-in
    ones field by field, and new sections add categories.
    :param directory: directory holding the configuration files. Defaults to the current directory.
    :param name: the base name of the configuration files
    :param builtin: the compiled-in categories. Defaults to BUILTIN_CATEGORIES
    :return: a dictionary of category to EndpointConfig
    """
    categories = dict(BUILTIN_CATEGORIES if builtin is None else builtin)
    config = load_config(name, directory or os.getcwd(), schema_directory)
    for category in config.sections:
        categories[category] = _merge_section(category, config[category], categories.get(category))
        logger.debug("configured category %s" % categories[category])
    return categories
