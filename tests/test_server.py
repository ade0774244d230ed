"""Tests for the HTTP endpoint (Graphviz is faked)."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from depviz.config import ServerConfig
from depviz.errors import RenderFailure
from depviz.server import create_app


@pytest.fixture
def project(write_tree) -> Path:
    return write_tree(
        {
            "proj/webapp/__init__.py": "import os\nfrom webcore import handler\n",
            "proj/webcore/__init__.py": "",
            "proj/webcore/handler.py": "import json\n",
        }
    )


@pytest.fixture
def rendered(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Replace Graphviz with a stub; returns the descriptions it received."""
    descriptions = []

    def fake_render(description, output_format="svg", program="dot", timeout=60.0):
        descriptions.append(description)
        out = tmp_path / f"artifact-{len(descriptions)}.{output_format}"
        out.write_bytes(b"<svg>rendered</svg>")
        return out

    monkeypatch.setattr("depviz.runtime.api.render", fake_render)
    return descriptions


@pytest.fixture
def client(project: Path, make_classifier) -> TestClient:
    config = ServerConfig(default_root=str(project / "proj" / "webapp"))
    app = create_app(config, classifier=make_classifier("os", "json"))
    return TestClient(app)


def test_renders_requested_unit(client: TestClient, project: Path, rendered, tmp_path) -> None:
    response = client.get("/", params={"f": str(project / "proj" / "webapp")})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert response.content == b"<svg>rendered</svg>"
    assert b"webcore" in rendered[0]
    # The artifact is removed once served.
    assert not (tmp_path / "artifact-1.svg").exists()


def test_missing_parameter_uses_default_root(client: TestClient, rendered) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert b"webapp" in rendered[0]


def test_dotted_unit_name(project: Path, make_classifier, rendered) -> None:
    config = ServerConfig(search_paths=[str(project / "proj")])
    client = TestClient(create_app(config, classifier=make_classifier("os", "json")))

    response = client.get("/", params={"f": "webcore"})

    assert response.status_code == 200
    assert b"webcore" in rendered[0]


def test_focus_view(client: TestClient, rendered) -> None:
    response = client.get("/", params={"view": "focus"})

    assert response.status_code == 200
    assert b"cluster_focus" in rendered[0]


def test_unknown_view_is_rejected(client: TestClient, rendered) -> None:
    response = client.get("/", params={"view": "sideways"})

    assert response.status_code == 422
    assert rendered == []


def test_missing_directory_is_500(client: TestClient, tmp_path: Path, rendered) -> None:
    response = client.get("/", params={"f": str(tmp_path / "nowhere")})

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert "does not exist" in response.text
    assert rendered == []


def test_empty_directory_is_500(client: TestClient, tmp_path: Path, rendered) -> None:
    (tmp_path / "hollow").mkdir()

    response = client.get("/", params={"f": str(tmp_path / "hollow")})

    assert response.status_code == 500
    assert "no unit found" in response.text


def test_render_failure_is_500(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_render(*args, **kwargs):
        raise RenderFailure("dot not found on PATH, install graphviz")

    monkeypatch.setattr("depviz.runtime.api.render", broken_render)

    response = client.get("/")

    assert response.status_code == 500
    assert "graphviz" in response.text


def test_app_exposes_config(client: TestClient) -> None:
    assert client.app.state.config.max_depth == 3
