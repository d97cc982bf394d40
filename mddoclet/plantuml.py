"""Adapter around the PlantUML command line renderer.

The renderer is run in pipe mode: the diagram description goes to stdin and
the image comes back on stdout. The process is killed once ``timeout``
expires, so a stuck Java process cannot hold up documentation generation.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import typing as typ

from mddoclet._constants import DEFAULT_DIAGRAM_TIMEOUT
from mddoclet.errors import DiagramRenderError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("plantuml",)
SUPPORTED_FORMATS = ("png", "svg")


class DiagramRenderer(typ.Protocol):
    """Anything able to turn a diagram description into image bytes."""

    def render(self, source: str, image_format: str = "png") -> bytes:
        """Return the rendered image or raise :class:`DiagramRenderError`."""
        ...


def _extract_error_details(stderr_text: str) -> str:
    """Condense PlantUML stderr into a one-line message."""
    lines = [line.strip() for line in stderr_text.splitlines() if line.strip()]
    if not lines:
        return "unknown error"
    # PlantUML reports syntax errors as: ERROR / <line> / <message>
    if len(lines) >= 3 and lines[0].upper() == "ERROR" and lines[1].isdigit():  # noqa: PLR2004
        return f"line {lines[1]}: {lines[2]}"
    return "; ".join(lines[:4])


def prepare_source(source: str) -> str:
    """Wrap ``source`` in ``@startuml``/``@enduml`` unless it has a start directive."""
    normalized = source.replace("\r\n", "\n").strip("\n")
    has_start = any(
        line.strip().lower().startswith("@start") for line in normalized.splitlines()
    )
    if has_start:
        return normalized + "\n"
    return f"@startuml\n{normalized}\n@enduml\n"


class PlantUmlRenderer:
    """Render diagrams by piping them through the ``plantuml`` executable."""

    def __init__(
        self,
        command: cabc.Sequence[str] = DEFAULT_COMMAND,
        *,
        timeout: float = DEFAULT_DIAGRAM_TIMEOUT,
    ) -> None:
        self.command = list(command)
        self.timeout = timeout

    def render(self, source: str, image_format: str = "png") -> bytes:
        """Render ``source`` and return the image bytes.

        Parameters
        ----------
        source : str
            Diagram description, optionally preceded by a shared preamble.
        image_format : str, optional
            ``"png"`` (default) or ``"svg"``.

        Raises
        ------
        DiagramRenderError
            If the executable is missing, exits with an error, times out, or
            produces no output.
        """
        if image_format not in SUPPORTED_FORMATS:
            msg = f"Unsupported diagram format {image_format!r}"
            raise DiagramRenderError(msg)
        executable = shutil.which(self.command[0])
        if not executable:
            msg = f"Diagram renderer '{self.command[0]}' was not found on PATH"
            raise DiagramRenderError(msg)
        args = [
            executable,
            *self.command[1:],
            "-pipe",
            f"-t{image_format}",
            "-charset",
            "UTF-8",
        ]
        logger.debug("running %s", " ".join(args))
        try:
            result = subprocess.run(  # noqa: S603
                args,
                input=prepare_source(source).encode("utf-8"),
                capture_output=True,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            msg = f"Diagram renderer timed out after {self.timeout:g}s"
            raise DiagramRenderError(msg) from exc
        except OSError as exc:
            msg = f"Diagram renderer could not be started: {exc}"
            raise DiagramRenderError(msg) from exc

        if result.returncode != 0:
            details = _extract_error_details(result.stderr.decode("utf-8", "replace"))
            msg = f"Diagram renderer failed: {details}"
            raise DiagramRenderError(msg)
        if not result.stdout:
            msg = "Diagram renderer produced no output"
            raise DiagramRenderError(msg)
        return result.stdout


__all__ = ["DiagramRenderer", "PlantUmlRenderer", "prepare_source"]
