"""
HPMA — Content Bundle Loader

Reads the field-guide content (identities, mode modifiers, primary / dyad /
triad evaluations, rules and thresholds) from JSON files and validates it
into a ``ContentBundle``.  Loaded once per directory per process.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

import structlog

from hpma.config import get_settings
from hpma.schemas.report import ContentBundle

logger = structlog.get_logger("hpma.content_service")

CONTENT_FILES: dict[str, str] = {
    "identities": "identities.json",
    "modes": "modes.json",
    "primaries": "primaries.json",
    "dyads": "dyads.json",
    "triads": "triads.json",
    "rules": "rules.json",
}


def _read_json(path: Path) -> dict:
    try:
        with path.open(encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError:
        raise ValueError(f"Content file missing: {path}") from None
    except json.JSONDecodeError as exc:
        raise ValueError(f"Content file {path} is not valid JSON: {exc}") from exc


@lru_cache(maxsize=8)
def load_content(content_dir: str) -> ContentBundle:
    """Load and validate every content file under *content_dir*.

    Raises
    ------
    ValueError
        A file is missing or is not valid JSON.
    pydantic.ValidationError
        A file does not match the content schema.
    """
    root = Path(content_dir)
    raw = {section: _read_json(root / filename) for section, filename in CONTENT_FILES.items()}
    bundle = ContentBundle.model_validate(raw)
    logger.info(
        "content.loaded",
        content_dir=str(root),
        primaries=len(bundle.primaries.entries),
        dyads=len(bundle.dyads.entries),
        triads=len(bundle.triads.entries),
        rules=len(bundle.rules.rules),
    )
    return bundle


def get_content(content_dir: Optional[Path] = None) -> ContentBundle:
    """Return the bundle for *content_dir*, defaulting to the configured one."""
    return load_content(str(content_dir or get_settings().content_path))
