"""Unit metadata returned by the loader.

A unit is a Python package (the ``.py`` files directly inside one package
directory) or a top-level single-file module. Its identity is the dotted
import path, which is unique within one load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

LIST_ERROR = "list"
PARSE_ERROR = "parse"


@dataclass(frozen=True)
class UnitError:
    """A load or parse problem attached to a unit.

    Attributes:
        kind: ``"list"`` when the unit could not be located, ``"parse"``
            when one of its source files could not be read or parsed.
        message: Human-readable description.
        pos: Optional ``file:line`` position.
    """

    kind: str
    message: str
    pos: str = ""

    def __str__(self) -> str:
        if self.pos:
            return f"{self.pos}: {self.message}"
        return self.message


@dataclass
class Unit:
    """One resolvable dependency node.

    Attributes:
        path: Dotted import path; the unit identity.
        name: Short display label.
        file: Package directory or module file, None when unresolved.
        is_package: Whether ``file`` is a package directory.
        imports: Import path to imported unit.
        errors: Load/parse errors attached to this unit.
    """

    path: str
    name: str = ""
    file: Optional[Path] = None
    is_package: bool = False
    imports: Dict[str, "Unit"] = field(default_factory=dict, repr=False, compare=False)
    errors: List[UnitError] = field(default_factory=list, compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.path.rsplit(".", 1)[-1]

    @property
    def locator(self) -> str:
        """Pattern that loads this unit again (file location when known)."""
        if self.file is not None:
            return str(self.file)
        return self.path

    def direct_dep(self, path: str) -> "Unit":
        """Return the directly imported unit with the given identity.

        Raises:
            KeyError: If this unit does not import ``path``.
        """
        for dep in self.imports.values():
            if dep.path == path:
                return dep
        raise KeyError(f"unit {self.path} does not import unit with path {path}")

    def resolve_import(self, alias: str) -> "Unit":
        """Return the unit bound to ``alias`` in the import mapping.

        Raises:
            KeyError: If ``alias`` is not one of this unit's imports.
        """
        try:
            return self.imports[alias]
        except KeyError:
            raise KeyError(f"unit {self.path} does not import {alias}") from None

    def missing_dependencies(self) -> List[str]:
        """Sorted paths of imports that could not be located."""
        return sorted(
            dep.path
            for dep in self.imports.values()
            if any(err.kind == LIST_ERROR for err in dep.errors)
        )


def missing_unit(path: str, message: str = "") -> Unit:
    """Build a placeholder unit for an import that could not be located."""
    return Unit(
        path=path,
        errors=[UnitError(LIST_ERROR, message or f"cannot find module {path!r}")],
    )
