"""
Connectors to the local host: command execution and pseudo-file access.
"""

from .local_connector import LocalConnector, CommandResult

__all__ = ['LocalConnector', 'CommandResult']
