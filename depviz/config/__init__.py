"""Configuration schema and loading for depviz."""

from .loader import ConfigSource, load_server_config
from .schema import SUPPORTED_FORMATS, ServerConfig, parse_listen_address

__all__ = [
    "ConfigSource",
    "SUPPORTED_FORMATS",
    "ServerConfig",
    "load_server_config",
    "parse_listen_address",
]
