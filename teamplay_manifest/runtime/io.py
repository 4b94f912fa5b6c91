from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from teamplay_manifest.core.errors import ParseError
from teamplay_manifest.core.manifest import Manifest
from teamplay_manifest.core.serialization import from_json, to_json

logger = logging.getLogger(__name__)

ManifestSource = Union[Manifest, Mapping[str, Any], Path, str]


def read_manifest(
    source: ManifestSource,
    status_aliases: Optional[Mapping[str, str]] = None,
) -> Manifest:
    """
    Resolve any manifest source to a Manifest.

    Accepts a Manifest (returned unchanged), an already-parsed JSON mapping,
    a Path to a manifest file, or a string holding either a file path or
    JSON text.

    Raises:
        ParseError: If the source cannot be read or parsed.
    """
    if isinstance(source, Manifest):
        return source
    if isinstance(source, Mapping):
        return from_json(source, status_aliases=status_aliases)

    if isinstance(source, Path):
        try:
            if not source.is_file():
                raise ParseError(f"Manifest file {source} does not exist", found=str(source))
            logger.debug(f"Reading manifest from {source}")
            text = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(
                f"Cannot read manifest file {source}: {exc}", found=str(source)
            ) from exc
        return from_json(text, status_aliases=status_aliases)

    if isinstance(source, str):
        text = source.strip()
        # Anything that is not a JSON object is taken as a path.
        if not text.startswith("{"):
            return read_manifest(Path(source), status_aliases=status_aliases)
        return from_json(text, status_aliases=status_aliases)

    raise ParseError(
        "Unsupported manifest source",
        expected="Manifest, mapping, path or JSON text",
        found=type(source).__name__,
    )


def write_manifest(manifest: Manifest, path: Path, pretty: Union[bool, int] = 2) -> Path:
    """
    Write a manifest as UTF-8 JSON with a trailing newline.
    """
    path = Path(path)
    path.write_text(to_json(manifest, pretty=pretty) + "\n", encoding="utf-8")
    logger.debug(f"Wrote {manifest.status.value} manifest to {path}")
    return path
