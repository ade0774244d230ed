"""Tests for Graphviz rendering (the dot program is faked)."""

import shutil
import subprocess
from pathlib import Path

import pytest

from depviz.errors import RenderFailure
from depviz.export.render import media_type, render

DESCRIPTION = b"digraph depviz { a -> b; }"


@pytest.fixture
def fake_dot(monkeypatch: pytest.MonkeyPatch):
    """Pretend ``dot`` is installed; returns the list of recorded calls."""
    calls = []

    def fake_run(cmd, input=None, capture_output=False, timeout=None, check=False):
        calls.append({"cmd": cmd, "input": input, "timeout": timeout})
        Path(cmd[cmd.index("-o") + 1]).write_bytes(b"<svg/>")
        return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")

    monkeypatch.setattr(shutil, "which", lambda program: f"/usr/bin/{program}")
    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


def test_render_pipes_description_to_dot(fake_dot) -> None:
    output = render(DESCRIPTION, output_format="svg", timeout=5)
    try:
        assert output.read_bytes() == b"<svg/>"
        assert output.name.startswith("depviz-")
        assert output.suffix == ".svg"

        call = fake_dot[0]
        assert call["cmd"][:2] == ["/usr/bin/dot", "-Tsvg"]
        assert call["input"] == DESCRIPTION
        assert call["timeout"] == 5
    finally:
        output.unlink()


def test_missing_program_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(shutil, "which", lambda program: None)

    with pytest.raises(RenderFailure, match="not found on PATH"):
        render(DESCRIPTION)


def test_nonzero_exit_raises_and_cleans_up(monkeypatch: pytest.MonkeyPatch) -> None:
    outputs = []

    def failing_run(cmd, **kwargs):
        outputs.append(Path(cmd[cmd.index("-o") + 1]))
        return subprocess.CompletedProcess(cmd, 1, stdout=b"", stderr=b"syntax error in line 1")

    monkeypatch.setattr(shutil, "which", lambda program: "/usr/bin/dot")
    monkeypatch.setattr(subprocess, "run", failing_run)

    with pytest.raises(RenderFailure, match="syntax error in line 1"):
        render(DESCRIPTION)
    assert not outputs[0].exists()


def test_timeout_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def slow_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))

    monkeypatch.setattr(shutil, "which", lambda program: "/usr/bin/dot")
    monkeypatch.setattr(subprocess, "run", slow_run)

    with pytest.raises(RenderFailure, match="timed out"):
        render(DESCRIPTION, timeout=1)


def test_empty_output_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def silent_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")

    monkeypatch.setattr(shutil, "which", lambda program: "/usr/bin/dot")
    monkeypatch.setattr(subprocess, "run", silent_run)

    with pytest.raises(RenderFailure, match="no output"):
        render(DESCRIPTION)


@pytest.mark.parametrize(
    "fmt, expected",
    [
        ("svg", "image/svg+xml"),
        ("png", "image/png"),
        ("pdf", "application/pdf"),
        ("dot", "text/vnd.graphviz"),
        ("weird", "application/octet-stream"),
    ],
)
def test_media_type(fmt: str, expected: str) -> None:
    assert media_type(fmt) == expected
