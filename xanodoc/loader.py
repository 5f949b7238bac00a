"""Load workspace exports and raw OpenAPI documents from disk.

Exports come as JSON or YAML; the platform wraps the entity arrays in a
``payload`` key, which is unwrapped here.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def parse_document(text: str, suffix: str = "") -> Any:
    """Parse JSON or YAML text, picking the parser from the file suffix.

    Without a known suffix JSON is tried first, then YAML.
    """
    suffix = suffix.lower()
    try:
        if suffix == ".json":
            return json.loads(text)
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(text)
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"Could not parse document: {exc}") from exc


def load_document(path: Path) -> Any:
    """Read and parse a JSON/YAML file."""
    with open(path, encoding="utf-8") as f:
        return parse_document(f.read(), Path(path).suffix)


def get_payload(document: Any) -> dict[str, Any]:
    """Return the entity arrays of an export, unwrapping ``payload``."""
    if not isinstance(document, dict):
        raise ValueError("Workspace export must be a mapping")
    payload = document.get("payload", document)
    if not isinstance(payload, dict):
        raise ValueError("Workspace export payload must be a mapping")
    return payload


def load_export(path: Path) -> dict[str, Any]:
    """Load a workspace export and return its entity arrays."""
    payload = get_payload(load_document(path))
    logger.info("Loaded workspace export %s", path)
    return payload


def load_oas(path: Path) -> dict[str, Any]:
    """Load a raw OpenAPI document."""
    document = load_document(path)
    if not isinstance(document, dict):
        raise ValueError("OpenAPI document must be a mapping")
    return document
