"""Shared fixtures: in-memory unit graphs and on-disk package trees."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent
from typing import Callable, Dict, Iterable, List

import pytest

from depviz.loader.unit import Unit


class FakeClassifier:
    """Classifier marking a fixed set of top-level names as standard."""

    def __init__(self, standard: Iterable[str] = ()) -> None:
        self.standard = set(standard)
        self.calls: List[str] = []

    def is_standard(self, path: str) -> bool:
        self.calls.append(path)
        return path.split(".", 1)[0] in self.standard


def link_units(imports: Dict[str, List[str]]) -> Dict[str, Unit]:
    """Build units from ``{path: [imported paths]}``, sharing objects by path."""
    units: Dict[str, Unit] = {}

    def get(path: str) -> Unit:
        if path not in units:
            units[path] = Unit(path=path)
        return units[path]

    for path, deps in imports.items():
        unit = get(path)
        for dep in deps:
            unit.imports[dep] = get(dep)
    return units


@pytest.fixture
def make_classifier() -> Callable[..., FakeClassifier]:
    """Factory for classifiers: ``make_classifier("fmt", "os")``."""
    return lambda *standard: FakeClassifier(standard)


@pytest.fixture
def link() -> Callable[[Dict[str, List[str]]], Dict[str, Unit]]:
    return link_units


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Write ``{relative path: source}`` under tmp_path and return tmp_path."""

    def _write(files: Dict[str, str]) -> Path:
        for rel, content in files.items():
            target = tmp_path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(dedent(content), encoding="utf-8")
        return tmp_path

    return _write
