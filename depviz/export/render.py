"""Render DOT descriptions with the Graphviz ``dot`` program.

One attempt per call: the description is piped to ``dot -T<fmt> -o <out>``
and the path of the produced file is returned. The caller owns the file
and deletes it once it has been served.
"""

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path

from depviz.errors import RenderFailure

logger = logging.getLogger("depviz.export.render")

MEDIA_TYPES = {
    "svg": "image/svg+xml",
    "png": "image/png",
    "pdf": "application/pdf",
    "dot": "text/vnd.graphviz",
}

DEFAULT_TIMEOUT = 60.0


def media_type(output_format: str) -> str:
    """Content type served for ``output_format``."""
    return MEDIA_TYPES.get(output_format, "application/octet-stream")


def _discard(path: Path) -> None:
    path.unlink(missing_ok=True)


def render(
    description: bytes,
    output_format: str = "svg",
    program: str = "dot",
    timeout: float = DEFAULT_TIMEOUT,
) -> Path:
    """Render ``description`` to a temporary file.

    Args:
        description: DOT text.
        output_format: Graphviz output format (``-T`` value).
        program: Graphviz layout program.
        timeout: Seconds before the render is abandoned.

    Returns:
        Path of the rendered artifact.

    Raises:
        RenderFailure: If the program is missing, fails, times out or
            writes nothing.
    """
    executable = shutil.which(program)
    if not executable:
        logger.error("Missing required executable on PATH: %s", program)
        raise RenderFailure(f"{program} not found on PATH, install graphviz")

    with tempfile.NamedTemporaryFile(
        prefix="depviz-", suffix=f".{output_format}", delete=False
    ) as tmp:
        output_path = Path(tmp.name)

    cmd = [executable, f"-T{output_format}", "-o", str(output_path)]
    logger.debug("Rendering %d bytes with %s", len(description), " ".join(cmd))
    try:
        res = subprocess.run(
            cmd,
            input=description,
            capture_output=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        _discard(output_path)
        raise RenderFailure(f"{program} timed out after {timeout:g}s") from exc
    except OSError as exc:
        _discard(output_path)
        raise RenderFailure(f"cannot run {program}: {exc}") from exc

    if res.returncode != 0:
        _discard(output_path)
        stderr = res.stderr.decode("utf-8", errors="replace").strip()
        logger.error("%s failed with exit code %d: %s", program, res.returncode, stderr)
        raise RenderFailure(f"{program} returned exit code {res.returncode}: {stderr}")

    if not output_path.exists() or output_path.stat().st_size == 0:
        _discard(output_path)
        raise RenderFailure(f"{program} produced no output")

    logger.debug("Rendered %s", output_path)
    return output_path


__all__ = ["MEDIA_TYPES", "media_type", "render"]
