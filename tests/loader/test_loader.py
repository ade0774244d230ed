"""Tests for the AST-based unit loader."""

from pathlib import Path

import pytest

from depviz.config import ServerConfig
from depviz.loader import UnitLoader, is_test_file, load_units
from depviz.loader.unit import LIST_ERROR, PARSE_ERROR

PROJECT = {
    "proj/app/__init__.py": """
        import os
        from . import views
        from .core import engine
        import helperlib
        import ghost_dep_xyz
    """,
    "proj/app/views.py": """
        from app.core import engine
    """,
    "proj/app/test_app.py": """
        import pytest_only_dep_xyz
    """,
    "proj/app/core/__init__.py": "",
    "proj/app/core/engine.py": """
        import json
        from ..util import tools
    """,
    "proj/app/util/__init__.py": """
        import deeper_missing_xyz
    """,
    "proj/app/util/tools.py": "VALUE = 1\n",
    "proj/helperlib.py": """
        import app
    """,
}


@pytest.fixture
def project(write_tree) -> Path:
    return write_tree(PROJECT) / "proj"


@pytest.fixture
def classifier(make_classifier):
    return make_classifier("os", "json", "sys")


def test_loads_package_directory(project: Path, classifier) -> None:
    loader = UnitLoader(classifier=classifier)

    units = loader.load(str(project / "app"))

    assert len(units) == 1
    root = units[0]
    assert root.path == "app"
    assert root.is_package
    assert root.file == project / "app"
    assert root.errors == []
    assert sorted(root.imports) == ["app.core", "ghost_dep_xyz", "helperlib", "os"]


def test_relative_imports_resolve_to_owning_packages(project: Path, classifier) -> None:
    root = UnitLoader(classifier=classifier).load(str(project / "app"))[0]

    core = root.direct_dep("app.core")
    assert core.file == project / "app" / "core"
    assert sorted(core.imports) == ["app.util", "json"]


def test_same_unit_imports_are_dropped(project: Path, classifier) -> None:
    root = UnitLoader(classifier=classifier).load(str(project / "app"))[0]

    # `from . import views` names a module of the root unit itself.
    assert "app" not in root.imports
    assert "app.views" not in root.imports


def test_standard_imports_are_recorded_but_not_resolved(project: Path, classifier) -> None:
    root = UnitLoader(classifier=classifier).load(str(project / "app"))[0]

    os_unit = root.resolve_import("os")
    assert os_unit.file is None
    assert os_unit.errors == []


def test_missing_dependencies(project: Path, classifier) -> None:
    root = UnitLoader(classifier=classifier).load(str(project / "app"))[0]

    assert root.missing_dependencies() == ["ghost_dep_xyz"]
    ghost = root.direct_dep("ghost_dep_xyz")
    assert ghost.errors[0].kind == LIST_ERROR


def test_direct_dep_and_resolve_import_raise_for_unknown(project: Path, classifier) -> None:
    root = UnitLoader(classifier=classifier).load(str(project / "app"))[0]

    with pytest.raises(KeyError):
        root.direct_dep("not.imported")
    with pytest.raises(KeyError):
        root.resolve_import("nope")


def test_test_files_excluded_by_default(project: Path, classifier) -> None:
    loader = UnitLoader(classifier=classifier)
    root = loader.load(str(project / "app"))[0]

    assert "pytest_only_dep_xyz" not in root.imports
    assert all(not is_test_file(path.name) for path in loader.source_files(root))


def test_test_files_included_when_requested(project: Path, classifier) -> None:
    root = UnitLoader(include_tests=True, classifier=classifier).load(str(project / "app"))[0]

    assert "pytest_only_dep_xyz" in root.imports
    assert root.missing_dependencies() == ["ghost_dep_xyz", "pytest_only_dep_xyz"]


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("test_app.py", True),
        ("engine_test.py", True),
        ("conftest.py", True),
        ("testing.py", False),
        ("engine.py", False),
    ],
)
def test_is_test_file(filename: str, expected: bool) -> None:
    assert is_test_file(filename) is expected


def test_max_depth_bounds_parsing(project: Path, classifier) -> None:
    shallow = UnitLoader(max_depth=2, classifier=classifier).load(str(project / "app"))[0]
    util = shallow.direct_dep("app.core").direct_dep("app.util")
    assert util.imports == {}

    deep = UnitLoader(classifier=classifier).load(str(project / "app"))[0]
    util = deep.direct_dep("app.core").direct_dep("app.util")
    assert "deeper_missing_xyz" in util.imports


def test_import_graph_records_edges(project: Path, classifier) -> None:
    loader = UnitLoader(classifier=classifier)
    loader.load(str(project / "app"))

    assert loader.graph.has_edge("app", "app.core")
    assert loader.graph.has_edge("app.core", "app.util")
    assert loader.graph.has_edge("helperlib", "app")
    assert loader.graph.nodes["app"]["unit"].path == "app"


def test_cycles_share_unit_objects(project: Path, classifier) -> None:
    root = UnitLoader(classifier=classifier).load(str(project / "app"))[0]

    helper = root.direct_dep("helperlib")
    assert helper.direct_dep("app") is root


def test_dotted_name_resolved_against_search_paths(project: Path, classifier) -> None:
    units = UnitLoader(search_paths=[project], classifier=classifier).load("app.core")

    assert units[0].path == "app.core"
    assert units[0].file == project / "app" / "core"


def test_module_file_in_package_loads_package(project: Path, classifier) -> None:
    units = UnitLoader(classifier=classifier).load(str(project / "app" / "views.py"))

    assert units[0].path == "app"


def test_single_module_file(project: Path, classifier) -> None:
    units = UnitLoader(classifier=classifier).load(str(project / "helperlib.py"))

    root = units[0]
    assert root.path == "helperlib"
    assert root.file == project / "helperlib.py"
    assert not root.is_package
    assert list(root.imports) == ["app"]


def test_plain_directory_is_named_after_itself(write_tree, classifier) -> None:
    base = write_tree(
        {
            "scripts/run.py": "import tool_xyz\nfrom . import nothing\n",
        }
    )

    root = UnitLoader(classifier=classifier).load(str(base / "scripts"))[0]

    assert root.path == "scripts"
    assert root.errors == []
    assert list(root.imports) == ["tool_xyz"]


def test_directory_without_sources_yields_nothing(tmp_path: Path, classifier) -> None:
    (tmp_path / "empty").mkdir()

    assert UnitLoader(classifier=classifier).load(str(tmp_path / "empty")) == []


def test_missing_directory_is_reported_on_root(tmp_path: Path, classifier) -> None:
    units = UnitLoader(classifier=classifier).load(str(tmp_path / "nope"))

    assert len(units) == 1
    assert units[0].errors[0].kind == LIST_ERROR
    assert "does not exist" in units[0].errors[0].message


def test_unknown_dotted_name_is_reported_on_root(tmp_path: Path, classifier) -> None:
    units = UnitLoader(search_paths=[tmp_path], classifier=classifier).load("no_such_unit_xyz")

    assert units[0].path == "no_such_unit_xyz"
    assert units[0].errors[0].kind == LIST_ERROR


def test_syntax_errors_become_parse_errors(write_tree, classifier) -> None:
    base = write_tree(
        {
            "broken/__init__.py": "import fine_dep_xyz\n",
            "broken/bad.py": "def (:\n",
        }
    )

    root = UnitLoader(classifier=classifier).load(str(base / "broken"))[0]

    assert len(root.errors) == 1
    error = root.errors[0]
    assert error.kind == PARSE_ERROR
    assert error.pos.startswith(str(base / "broken" / "bad.py"))
    # Imports from readable files are still collected.
    assert "fine_dep_xyz" in root.imports


def test_load_units_uses_config(project: Path, classifier) -> None:
    config = ServerConfig(include_tests=True, search_paths=[str(project)])

    units = load_units("app", config, classifier=classifier)

    assert units[0].path == "app"
    assert "pytest_only_dep_xyz" in units[0].imports
