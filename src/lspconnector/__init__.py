"""

Language Server Connections

- Category: the kind of document, e.g. a programming language, served by one language server.
- EndpointConfig: the compiled-in address of a category's server, and the environment variables
  that override it. The built-in table can be extended by configuration files.
- EndpointResolver: computes the host and port for a category. Each of host and port is taken from
  the category variable (RUST_HOST), the generic variable (HOST) or the default, in that order.
- Conduit: abstraction of a bi-directional channel. Combines 2 streams for reading and writing.
- Connector: opens a conduit to an endpoint, here a TCP socket.
- Session: one connection to one category's server. Connects on a background thread and
  moves from connecting to active, or to failed. Closing is explicit.
- ConnectionBroker: holds at most one session per category. A category's session is created the
  first time a document of the category is seen. Failed sessions are not retried.
- Activation sources: report documents opened by the editor (DocumentTracker) or found on
  disk (WorkspaceScanner).
- BrokerService: start() wires a source to the broker, stop() closes every session.


## Threading

Each session connects on its own daemon thread, so a server that is slow to answer does not hold up
activation of other categories. The check for an existing session and the registration of a new one
happen under the broker's lock, so concurrent activations of one category create one session.

Session events are fired on the session threads into a queue, and published by
ConnectionBroker.update() on the caller's thread.

Shutdown closes the sessions in parallel and waits for all of them.

"""
