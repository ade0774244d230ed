"""AST-based unit loader.

Resolves a directory or dotted module name to a root :class:`Unit` and
discovers the units it imports. Sources are only parsed with :mod:`ast`;
nothing is imported or executed.

Discovery is breadth-first from the root and bounded by ``max_depth``, so
every unit is first reached at its shortest distance from the root. The
walker never expands a unit deeper than the loader parsed it.
"""

from __future__ import annotations

import ast
import fnmatch
import logging
import os
import sys
from collections import deque
from importlib.machinery import EXTENSION_SUFFIXES
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Deque,
    Dict,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)

import networkx as nx

from depviz.loader.classifier import StandardClassifier, default_classifier
from depviz.loader.unit import PARSE_ERROR, Unit, UnitError, missing_unit

if TYPE_CHECKING:
    from depviz.config import ServerConfig

logger = logging.getLogger("depviz.loader.loader")

TEST_FILE_PATTERNS = ("test_*.py", "*_test.py", "conftest.py")

# (candidate module, fallback module) for one imported name
ImportCandidate = Tuple[str, Optional[str]]


def is_test_file(filename: str) -> bool:
    """Return True if ``filename`` is a test-only source file."""
    return any(fnmatch.fnmatch(filename, pattern) for pattern in TEST_FILE_PATTERNS)


def _is_dotted_name(name: str) -> bool:
    return bool(name) and all(part.isidentifier() for part in name.split("."))


class UnitLoader:
    """Loads a root unit and the units it transitively imports.

    A loader holds the state of one load (resolved units, parsed sources,
    the import graph) and is meant to be created per request.

    Args:
        include_tests: Read ``test_*.py``, ``*_test.py`` and ``conftest.py``.
        search_paths: Directories searched for dotted names before the
            working directory and ``sys.path``.
        max_depth: Stop parsing imports of units at this distance from the
            root. None parses everything reachable.
        classifier: Standard library classifier. Standard imports are
            recorded but never resolved on disk or expanded.
    """

    def __init__(
        self,
        include_tests: bool = False,
        search_paths: Optional[Sequence[Union[str, Path]]] = None,
        max_depth: Optional[int] = None,
        classifier: Optional[StandardClassifier] = None,
    ) -> None:
        self.include_tests = include_tests
        self.max_depth = max_depth
        self.classifier = classifier or default_classifier()
        self.graph: nx.DiGraph = nx.DiGraph()

        self._roots: List[Path] = [Path(p).expanduser() for p in search_paths or ()]
        self._units: Dict[str, Unit] = {}
        self._resolved: Dict[str, Optional[Unit]] = {}
        self._sources: Dict[str, List[Path]] = {}

    @classmethod
    def from_config(
        cls,
        config: "ServerConfig",
        classifier: Optional[StandardClassifier] = None,
    ) -> "UnitLoader":
        return cls(
            include_tests=config.include_tests,
            search_paths=config.search_paths,
            max_depth=config.max_depth,
            classifier=classifier,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, pattern: str) -> List[Unit]:
        """Load the unit named by ``pattern`` and its imports.

        Args:
            pattern: A directory or ``.py`` file path, or a dotted module
                name resolved against the search path.

        Returns:
            ``[root]``, or an empty list when ``pattern`` is a directory
            without Python sources. A root that cannot be located is
            returned with a ``list`` error rather than raised.
        """
        logger.debug("Loading units for %s", pattern)
        root = self._load_root(pattern)
        if root is None:
            logger.info("No Python sources found for %s", pattern)
            return []

        if root.file is not None:
            self._expand(root)

        logger.info(
            "Loaded %s: %d units, %d import edges",
            root.path,
            self.graph.number_of_nodes(),
            self.graph.number_of_edges(),
        )
        return [root]

    def source_files(self, unit: Unit) -> List[Path]:
        """Python source files belonging to ``unit``, sorted by name."""
        cached = self._sources.get(unit.path)
        if cached is not None:
            return cached

        files: List[Path] = []
        if unit.file is not None and unit.file.is_dir():
            files = sorted(
                path
                for path in unit.file.glob("*.py")
                if path.is_file() and (self.include_tests or not is_test_file(path.name))
            )
        elif unit.file is not None and unit.file.suffix == ".py":
            files = [unit.file]
        self._sources[unit.path] = files
        return files

    # ------------------------------------------------------------------
    # Root resolution
    # ------------------------------------------------------------------

    def _load_root(self, pattern: str) -> Optional[Unit]:
        if self._looks_like_path(pattern):
            target = Path(pattern).expanduser()
            if not target.exists():
                return self._register(
                    missing_unit(pattern, f"directory {pattern} does not exist")
                )
            target = target.resolve()
            if target.is_file():
                if target.suffix != ".py":
                    return self._register(
                        missing_unit(pattern, f"{pattern} is not a Python source file")
                    )
                if (target.parent / "__init__.py").is_file():
                    return self._unit_for_directory(target.parent)
                return self._unit_for_module_file(target)
            return self._unit_for_directory(target)

        if not _is_dotted_name(pattern):
            return self._register(missing_unit(pattern, f"invalid unit name {pattern!r}"))

        unit = self._find(pattern)
        if unit is None:
            unit = self._missing(pattern)
        return unit

    @staticmethod
    def _looks_like_path(pattern: str) -> bool:
        return (
            pattern.startswith((".", "/", "~"))
            or os.sep in pattern
            or "/" in pattern
            or pattern.endswith(".py")
            or Path(pattern).is_dir()
        )

    def _unit_for_directory(self, directory: Path) -> Optional[Unit]:
        parts: List[str] = []
        current = directory
        while (current / "__init__.py").is_file():
            parts.insert(0, current.name)
            current = current.parent

        if parts:
            self._add_search_root(current)
            unit = self._find(".".join(parts))
        else:
            # Plain directory of scripts: named after the directory.
            self._add_search_root(directory)
            unit = self._register(Unit(path=directory.name or str(directory), file=directory))

        if unit is None or not self.source_files(unit):
            return None
        return unit

    def _unit_for_module_file(self, file: Path) -> Unit:
        self._add_search_root(file.parent)
        unit = self._find(file.stem)
        if unit is None or unit.file != file:
            unit = self._register(Unit(path=file.stem, file=file))
        return unit

    def _add_search_root(self, path: Path) -> None:
        if path not in self._roots:
            self._roots.insert(0, path)

    # ------------------------------------------------------------------
    # Dotted name resolution
    # ------------------------------------------------------------------

    def _search_roots(self) -> List[Path]:
        roots: List[Path] = []
        candidates = list(self._roots) + [Path.cwd()]
        candidates.extend(Path(entry) if entry else Path.cwd() for entry in sys.path)
        for root in candidates:
            if root not in roots and root.is_dir():
                roots.append(root)
        return roots

    def _find(self, dotted: str) -> Optional[Unit]:
        """Resolve a dotted module name to the unit that owns it."""
        if dotted in self._resolved:
            return self._resolved[dotted]
        if not _is_dotted_name(dotted):
            return None

        unit = self._find_uncached(dotted)
        self._resolved[dotted] = unit
        return unit

    def _find_uncached(self, dotted: str) -> Optional[Unit]:
        parts = dotted.split(".")
        roots = self._search_roots()

        for root in roots:
            base = root.joinpath(*parts)
            if (base / "__init__.py").is_file():
                return self._register(Unit(path=dotted, file=base, is_package=True))
            module_file = self._module_file(base)
            if module_file is not None:
                if len(parts) > 1:
                    # A plain module belongs to the package that contains it.
                    return self._find(".".join(parts[:-1]))
                return self._register(Unit(path=dotted, file=module_file))

        # Namespace packages only match once no regular package or module does.
        for root in roots:
            base = root.joinpath(*parts)
            if base.is_dir() and any(base.glob("*.py")):
                return self._register(Unit(path=dotted, file=base, is_package=True))
        return None

    @staticmethod
    def _module_file(base: Path) -> Optional[Path]:
        source = base.with_name(base.name + ".py")
        if source.is_file():
            return source
        for suffix in EXTENSION_SUFFIXES:
            extension = base.with_name(base.name + suffix)
            if extension.is_file():
                return extension
        return None

    def _register(self, unit: Unit) -> Unit:
        existing = self._units.get(unit.path)
        if existing is not None:
            return existing
        self._units[unit.path] = unit
        self.graph.add_node(unit.path, unit=unit)
        return unit

    def _missing(self, dotted: str) -> Unit:
        unit = self._register(missing_unit(dotted))
        self._resolved[dotted] = unit
        return unit

    # ------------------------------------------------------------------
    # Import discovery
    # ------------------------------------------------------------------

    def _expand(self, root: Unit) -> None:
        queue: Deque[Tuple[Unit, int]] = deque([(root, 0)])
        queued = {root.path}

        while queue:
            unit, depth = queue.popleft()
            self._parse_imports(unit)

            if self.max_depth is not None and depth + 1 >= self.max_depth:
                continue
            for dep in unit.imports.values():
                if dep.path in queued or dep.file is None:
                    continue
                if self.classifier.is_standard(dep.path):
                    continue
                queued.add(dep.path)
                queue.append((dep, depth + 1))

    def _parse_imports(self, unit: Unit) -> None:
        for source in self.source_files(unit):
            try:
                tree = ast.parse(source.read_bytes(), filename=str(source))
            except SyntaxError as exc:
                unit.errors.append(
                    UnitError(PARSE_ERROR, exc.msg, pos=f"{source}:{exc.lineno or 0}")
                )
                continue
            except ValueError as exc:
                unit.errors.append(UnitError(PARSE_ERROR, str(exc), pos=str(source)))
                continue
            except OSError as exc:
                unit.errors.append(
                    UnitError(PARSE_ERROR, f"cannot read source: {exc}", pos=str(source))
                )
                continue

            for candidate, fallback in self._imported_names(tree, unit, source):
                self._link(unit, candidate, fallback)

        if unit.errors:
            logger.debug("Unit %s has %d errors", unit.path, len(unit.errors))

    def _imported_names(
        self, tree: ast.AST, unit: Unit, source: Path
    ) -> Iterator[ImportCandidate]:
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    yield alias.name, None
            elif isinstance(node, ast.ImportFrom):
                base = self._absolute_module(node, unit, source)
                if base is None:
                    continue
                for alias in node.names:
                    if alias.name == "*":
                        yield base, None
                    else:
                        # `from pkg import name` may name a submodule or an attribute.
                        yield f"{base}.{alias.name}", base

    def _absolute_module(
        self, node: ast.ImportFrom, unit: Unit, source: Path
    ) -> Optional[str]:
        if node.level == 0:
            return node.module or None

        package = unit.path if unit.is_package else ""
        parts = package.split(".") if package else []
        if node.level > len(parts):
            logger.debug(
                "Relative import beyond top-level package in %s:%d",
                source,
                node.lineno,
            )
            return None
        anchor = ".".join(parts[: len(parts) - node.level + 1])
        return f"{anchor}.{node.module}" if node.module else anchor

    def _link(self, unit: Unit, candidate: str, fallback: Optional[str]) -> None:
        if self.classifier.is_standard(candidate):
            top = candidate.split(".", 1)[0]
            target = self._register(Unit(path=top))
        else:
            target = self._find(candidate)
            if target is None and fallback is not None:
                target = self._find(fallback)
                candidate = fallback
            if target is None:
                target = self._missing(candidate)

        if target.path == unit.path or target.file in self.source_files(unit):
            return
        unit.imports.setdefault(target.path, target)
        self.graph.add_edge(unit.path, target.path)


def load_units(
    pattern: str,
    config: "ServerConfig",
    classifier: Optional[StandardClassifier] = None,
) -> List[Unit]:
    """Load ``pattern`` with a fresh loader built from ``config``."""
    return UnitLoader.from_config(config, classifier=classifier).load(pattern)


__all__ = ["TEST_FILE_PATTERNS", "UnitLoader", "is_test_file", "load_units"]
