# src/manifest/loader.py - v1
"""Load the build step's resource manifest from disk.

Two layouts are accepted:

    {"version": "1.4.0", "resources": {"main.js": "<md5>", ...}, "shell": ["main.js"]}

or a bare ``{"main.js": "<md5>", ...}`` mapping, in which case the shell set
is empty.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from shellcache.core.errors import ManifestCorrupt, ManifestMissing
from shellcache.core.keys import normalize_key
from shellcache.core.models import BuildManifest, ResourceManifest

logger = logging.getLogger(__name__)


def load_build_manifest(path: Path | str) -> BuildManifest:
    """Read and validate a build manifest file.

    Raises:
        ManifestMissing: File does not exist.
        ManifestCorrupt: File is not a well-formed manifest.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ManifestMissing(f"Build manifest not found: {path}")
    return parse_build_manifest(path.read_text(encoding="utf-8"), source=str(path))


def parse_build_manifest(text: str, source: str = "<string>") -> BuildManifest:
    """Parse build manifest JSON text."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestCorrupt(f"{source}: invalid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ManifestCorrupt(f"{source}: expected a JSON object")

    if "resources" in raw:
        resources_raw = raw["resources"]
        shell_raw = raw.get("shell", [])
        version = raw.get("version")
    else:
        resources_raw, shell_raw, version = raw, [], None

    try:
        build = BuildManifest(
            resources=ResourceManifest(resources=resources_raw),
            shell=[normalize_key(k) for k in shell_raw],
            version=None if version is None else str(version),
        )
    except (ValidationError, TypeError) as e:
        raise ManifestCorrupt(f"{source}: invalid manifest: {e}") from e

    unknown = [k for k in build.shell if k not in build.resources]
    if unknown:
        logger.warning("Shell resources missing from manifest: %s", ", ".join(unknown))

    logger.debug(
        "Loaded manifest %s: %d resources, %d shell",
        source, len(build.resources), len(build.shell),
    )
    return build
