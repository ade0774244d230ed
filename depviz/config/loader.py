"""Helpers for loading server configuration from TOML/JSON sources.

``load_server_config`` accepts:

* None -> default ServerConfig
* dict -> ServerConfig.from_dict
* Path / path-like string -> load .toml/.json from filesystem
* Inline JSON/TOML strings

Keyword overrides (typically explicit command-line flags) are applied on
top of whatever the source provides.
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Union

from depviz.config.schema import ServerConfig

logger = logging.getLogger("depviz.config.loader")

ConfigSource = Union[str, Path, Dict[str, Any], None]


def _read_source(source: Union[str, Path]) -> Dict[str, Any]:
    """Parse a filesystem path or inline string into a mapping."""
    path = Path(source)
    if path.exists():
        text = path.read_text(encoding="utf-8")
        suffix = path.suffix.lower()
        if suffix in {".toml", ".tml"}:
            fmt = "toml"
        elif suffix == ".json":
            fmt = "json"
        else:
            fmt = "json" if text.lstrip().startswith("{") else "toml"
        logger.info("Loading configuration from file: %s (fmt=%s)", path, fmt)
    else:
        text = str(source)
        fmt = "json" if text.lstrip().startswith("{") else "toml"
        logger.info("Loading configuration from inline %s string", fmt)

    data = json.loads(text) if fmt == "json" else tomllib.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Top-level configuration must be a mapping/dict")

    # A [depviz] table is accepted so the options can live in a shared file.
    section = data.get("depviz")
    if isinstance(section, dict):
        return section
    return data


def load_server_config(
    source: ConfigSource = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ServerConfig:
    """Load ServerConfig from a configuration source plus overrides.

    Args:
        source: One of:
            * None: defaults
            * dict: already-parsed configuration mapping
            * str/Path: either a path to a .toml/.json file, or an inline
              TOML/JSON string (auto-detected)
        overrides: Values that take precedence over the source. Keys whose
            value is None are ignored.

    Returns:
        ServerConfig instance.

    Raises:
        TypeError: If the source type is not supported.
        ValueError: If the source does not parse to a mapping.
        pydantic.ValidationError: If a value is invalid.
    """
    if source is None:
        data: Dict[str, Any] = {}
    elif isinstance(source, dict):
        logger.debug("Loading ServerConfig from provided dict")
        data = dict(source)
    elif isinstance(source, (str, Path)):
        data = _read_source(source)
    else:
        raise TypeError(f"Unsupported config source type: {type(source)!r}")

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    return ServerConfig.from_dict(data)


__all__ = ["ConfigSource", "load_server_config"]
