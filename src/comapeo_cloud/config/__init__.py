"""
Configuration module for the CoMapeo Cloud client.
"""

from .settings import (
    Config,
    ConfigurationError,
    ExportConfig,
    ServerCredentials,
)

__all__ = [
    'Config',
    'ConfigurationError',
    'ExportConfig',
    'ServerCredentials'
]
