"""Standard library classification.

A unit is standard when the running interpreter ships it: a directory or
module file named after the import path exists under the stdlib root, or
the top-level name is compiled into the interpreter or lives in
``lib-dynload``. Standard units are pruned from every graph.
"""

from __future__ import annotations

import logging
import os
import sys
import sysconfig
import threading
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Union

logger = logging.getLogger("depviz.loader.classifier")


def _exists(path: Path) -> bool:
    """Stat ``path``; missing entries are False, other OS errors propagate."""
    try:
        os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return False
    return True


class StandardClassifier:
    """Decides whether an import path belongs to the standard library.

    Results are cached per path. The cache is shared by concurrent requests
    and guarded by a lock; classification does not depend on the request.

    Args:
        stdlib_root: Directory holding the standard library sources.
            Defaults to the running interpreter's ``stdlib`` path.
        fail_open: Outcome policy when the filesystem check raises an OS
            error. True keeps the unit in the graph (not standard).
    """

    def __init__(
        self,
        stdlib_root: Optional[Union[str, Path]] = None,
        fail_open: bool = True,
    ) -> None:
        if stdlib_root is None:
            stdlib_root = sysconfig.get_paths()["stdlib"]
        self.stdlib_root = Path(stdlib_root)
        self.fail_open = fail_open
        self._cache: Dict[str, bool] = {}
        self._dynload: Optional[FrozenSet[str]] = None
        self._lock = threading.Lock()

    def is_standard(self, path: str) -> bool:
        """Return True if ``path`` names a standard library unit."""
        with self._lock:
            cached = self._cache.get(path)
        if cached is not None:
            return cached

        try:
            result = self._check(path)
        except OSError as exc:
            result = not self.fail_open
            logger.debug(
                "Standard check for %s failed (%s); treating as %s",
                path,
                exc,
                "standard" if result else "not standard",
            )

        with self._lock:
            self._cache[path] = result
        return result

    def _check(self, path: str) -> bool:
        parts = [part for part in path.split(".") if part]
        if not parts:
            return False
        top = parts[0]
        if top in sys.builtin_module_names:
            return True

        for candidate in (self.stdlib_root.joinpath(*parts), self.stdlib_root / top):
            if _exists(candidate) and candidate.is_dir():
                return True
            if _exists(candidate.with_name(candidate.name + ".py")):
                return True

        return top in self._dynload_modules()

    def _dynload_modules(self) -> FrozenSet[str]:
        """Names of extension modules in ``lib-dynload`` (read once)."""
        with self._lock:
            if self._dynload is None:
                dynload = self.stdlib_root / "lib-dynload"
                names = set()
                if _exists(dynload):
                    for entry in os.listdir(dynload):
                        names.add(entry.split(".", 1)[0])
                self._dynload = frozenset(names)
            return self._dynload


_default_classifier: Optional[StandardClassifier] = None
_default_lock = threading.Lock()


def default_classifier() -> StandardClassifier:
    """Process-wide fail-open classifier for the running interpreter."""
    global _default_classifier
    with _default_lock:
        if _default_classifier is None:
            _default_classifier = StandardClassifier()
        return _default_classifier


def is_standard(path: str) -> bool:
    """Classify ``path`` with the default classifier."""
    return default_classifier().is_standard(path)


__all__ = ["StandardClassifier", "default_classifier", "is_standard"]
