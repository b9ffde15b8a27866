"""
Shared utilities: configuration, logging, exceptions, encryption.
"""
