"""Error taxonomy for graph construction, serialization and rendering.

Every error defined here is terminal for the request that raised it: the
HTTP layer turns it into a 500 response carrying ``str(error)``. Omissions
during traversal (revisited units, the depth boundary, standard units) are
not errors and never raise.
"""


class DepvizError(Exception):
    """Base class for all request-terminating errors."""

    pass


class LoadFailure(DepvizError):
    """The root unit could not be resolved or parsed.

    Raised when the loader fails outright, or when the root unit it returns
    carries load errors.
    """

    pass


class EmptyResult(LoadFailure):
    """The loader returned no units for the requested pattern."""

    pass


class SerializationFailure(DepvizError):
    """The graph model could not be converted to a DOT description."""

    pass


class RenderFailure(DepvizError):
    """The external renderer failed or produced no artifact."""

    pass


__all__ = [
    "DepvizError",
    "EmptyResult",
    "LoadFailure",
    "RenderFailure",
    "SerializationFailure",
]
