"""
The connector interfaces with an external language server that communicates via a conduit.

A connector can be thought of as a conduit factory for one endpoint.
"""
