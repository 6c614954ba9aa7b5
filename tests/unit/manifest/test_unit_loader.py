# tests/unit/manifest/test_loader.py - v1
"""Tests for manifest/loader.py."""

from __future__ import annotations

import json
import logging

import pytest

from shellcache.core.errors import ManifestCorrupt, ManifestMissing
from shellcache.manifest.loader import load_build_manifest, parse_build_manifest


class TestParseBuildManifest:
    def test_full_layout(self):
        build = parse_build_manifest(json.dumps({
            "version": "1.4.0",
            "resources": {"": "r1", "main.js": "j1"},
            "shell": ["", "main.js"],
        }))
        assert build.version == "1.4.0"
        assert build.resources.keys() == ["/", "main.js"]
        assert build.shell == ["/", "main.js"]

    def test_bare_mapping(self):
        build = parse_build_manifest('{"main.js": "j1", "index.html": "r1"}')
        assert len(build.resources) == 2
        assert build.shell == []
        assert build.version is None

    def test_numeric_version_stringified(self):
        build = parse_build_manifest('{"version": 3, "resources": {}}')
        assert build.version == "3"

    def test_invalid_json(self):
        with pytest.raises(ManifestCorrupt, match="invalid JSON"):
            parse_build_manifest("{nope", source="build.json")

    def test_not_an_object(self):
        with pytest.raises(ManifestCorrupt, match="expected a JSON object"):
            parse_build_manifest("[1, 2]")

    def test_non_string_fingerprint(self):
        with pytest.raises(ManifestCorrupt, match="invalid manifest"):
            parse_build_manifest('{"resources": {"main.js": ["x"]}}')

    def test_unknown_shell_key_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="shellcache"):
            build = parse_build_manifest('{"resources": {"main.js": "j1"}, "shell": ["gone.js"]}')
        assert build.shell == ["gone.js"]
        assert "gone.js" in caplog.text


class TestLoadBuildManifest:
    def test_load_file(self, tmp_path):
        path = tmp_path / "resource_manifest.json"
        path.write_text('{"resources": {"main.js": "j1"}, "shell": ["main.js"]}', encoding="utf-8")
        build = load_build_manifest(path)
        assert "main.js" in build.resources
        assert build.shell == ["main.js"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestMissing, match="not found"):
            load_build_manifest(tmp_path / "absent.json")

    def test_corrupt_file_names_source(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("garbage", encoding="utf-8")
        with pytest.raises(ManifestCorrupt, match="bad.json"):
            load_build_manifest(str(path))
