"""Render templates and write generated output.

Builders hand back (path, content) pairs; ``write_outputs`` applies them
under an output directory in order.
"""

from __future__ import annotations

import logging
import shutil
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

import jinja2

TEMPLATE_DIR = Path(__file__).parent / "templates"
OUTPUT_DIR = Path.cwd() / "output"

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_template(template_name: str, /, **context: Any) -> str:
    """Render one of the bundled templates."""
    return _environment().get_template(template_name).render(**context)


def clear_directory(directory: Path) -> None:
    """Remove everything inside ``directory``, keeping the directory itself."""
    if not directory.is_dir():
        return
    for child in directory.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


def write_outputs(
    outputs: Iterable[tuple[str, str]],
    out_dir: Path | None = None,
    clear: bool = False,
) -> int:
    """Write (path, content) pairs under ``out_dir``; returns files written.

    Paths are written in order, so a later entry for the same path
    overwrites an earlier one.
    """
    target = out_dir or OUTPUT_DIR
    if clear:
        clear_directory(target)
    target.mkdir(parents=True, exist_ok=True)

    count = 0
    for path, content in outputs:
        destination = target / path
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s", destination)
        count += 1
    return count
