"""Configuration schema definitions using Pydantic for validation.

A single ``ServerConfig`` carries every process-level option: what the
loader should include, which unit is rendered when a request does not name
one, where the server listens and how deep the traversal goes. Pydantic
catches bad values (unknown output format, negative depth, malformed
listen address) before the server starts.
"""

from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field, field_validator

SUPPORTED_FORMATS = ("svg", "png", "pdf", "dot")

DEFAULT_HOST = "0.0.0.0"


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` into its parts.

    The host may be omitted (``":9000"``), in which case the server binds
    every interface.

    Args:
        address: Listen address string.

    Returns:
        Tuple of (host, port).

    Raises:
        ValueError: If the port is missing, not numeric or out of range.
    """
    host, sep, port_text = address.rpartition(":")
    if not sep:
        raise ValueError(f"listen address {address!r} must have the form [host]:port")
    try:
        port = int(port_text)
    except ValueError as exc:
        raise ValueError(f"invalid port in listen address {address!r}") from exc
    if not 0 < port < 65536:
        raise ValueError(f"port {port} out of range in listen address {address!r}")
    host = host.strip("[]") or DEFAULT_HOST
    return host, port


class ServerConfig(BaseModel):
    """Process configuration for the dependency graph server.

    Attributes:
        include_tests: Whether the loader reads test files
            (``test_*.py``, ``*_test.py``, ``conftest.py``).
        default_root: Unit identifier rendered when a request has no ``f``.
        listen_address: ``[host]:port`` the HTTP server binds.
        max_depth: Maximum traversal depth. The root sits at depth 0 and a
            branch stops expanding once the next level would reach this value.
        output_format: Graphviz output format served to clients.
        standard_fail_open: When checking whether a unit is part of the
            standard library fails with an OS error, treat the unit as not
            standard (so it stays in the graph).
        sort_imports: Expand imports in alias order so repeated requests
            produce identical graphs.
        search_paths: Extra directories searched before ``sys.path`` when
            resolving dotted unit names.
        render_program: Graphviz executable used for rendering.
        render_timeout: Seconds a single render may take.
    """

    include_tests: bool = False
    default_root: str = "."
    listen_address: str = ":9000"
    max_depth: int = Field(default=3, ge=1, le=64)
    output_format: str = "svg"
    standard_fail_open: bool = True
    sort_imports: bool = True
    search_paths: List[str] = Field(default_factory=list)
    render_program: str = "dot"
    render_timeout: float = Field(default=60.0, gt=0.0, le=600.0)

    model_config = {"extra": "forbid"}

    @field_validator("output_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate that the output format is one Graphviz can serve here."""
        fmt = v.lower()
        if fmt not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Invalid output format '{v}'. Valid formats: {SUPPORTED_FORMATS}"
            )
        return fmt

    @field_validator("listen_address")
    @classmethod
    def validate_listen_address(cls, v: str) -> str:
        """Validate that the listen address parses."""
        parse_listen_address(v)
        return v

    @field_validator("default_root")
    @classmethod
    def validate_default_root(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("default_root must not be empty")
        return v

    def bind(self) -> Tuple[str, int]:
        """Return the (host, port) pair for the HTTP server."""
        return parse_listen_address(self.listen_address)

    @classmethod
    def default(cls) -> "ServerConfig":
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerConfig":
        """Create configuration from dictionary.

        Args:
            data: Configuration dictionary.

        Returns:
            ServerConfig instance.

        Raises:
            ValidationError: If configuration is invalid.
        """
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
