"""
Layered configuration files, loaded with configobj and validated against a schema.
"""
