"""
A conduit is a bi-directional channel to a language server. It combines a readable stream and a
writable stream, which the protocol layer consumes.
"""
