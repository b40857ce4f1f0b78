"""Tests for package.json discovery, reading and writing."""

import json

import pytest

from errors import ManifestError
from registry.npm.manifest import (
    detect_indent,
    find_package_json,
    read_manifest,
    write_manifest,
)

PACKAGE = {
    "name": "app",
    "dependencies": {"react": "^18.0.0", "lodash": "4.17.20"},
    "devDependencies": {"jest": "29.0.0"},
    "peerDependencies": {"react-dom": "^18.0.0"},
}


def write_package(path, data=PACKAGE, indent=2):
    path.write_text(json.dumps(data, indent=indent) + "\n", encoding="utf-8")
    return path


class TestFindPackageJson:
    """Test upward discovery."""

    def test_finds_in_parent(self, tmp_path):
        write_package(tmp_path / "package.json")
        nested = tmp_path / "src" / "deep"
        nested.mkdir(parents=True)
        assert find_package_json(str(nested)) == str(tmp_path / "package.json")

    def test_missing(self, tmp_path):
        with pytest.raises(ManifestError) as exc_info:
            find_package_json(str(tmp_path))
        assert exc_info.value.hint


class TestDetectIndent:
    """Test indentation sniffing."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ('{\n  "a": 1\n}', 2),
            ('{\n    "a": 1\n}', 4),
            ('{\n\t"a": 1\n}', "\t"),
            ('{"a": 1}', 2),
        ],
    )
    def test_detect(self, text, expected):
        assert detect_indent(text) == expected


class TestReadWrite:
    """Test manifest parsing, entry iteration and round-tripping."""

    def test_entries_in_manifest_order(self, tmp_path):
        manifest = read_manifest(str(write_package(tmp_path / "package.json")))
        names = [e.name for e in manifest.entries(["dependencies", "devDependencies"])]
        assert names == ["react", "lodash", "jest"]

    def test_non_string_versions_skipped(self, tmp_path):
        data = {"dependencies": {"a": "1.0.0", "b": {"version": "1"}}}
        manifest = read_manifest(str(write_package(tmp_path / "package.json", data)))
        assert [e.name for e in manifest.entries(["dependencies"])] == ["a"]

    def test_present_groups(self, tmp_path):
        manifest = read_manifest(str(write_package(tmp_path / "package.json")))
        groups = ["dependencies", "devDependencies", "optionalDependencies"]
        assert manifest.present_groups(groups) == ["dependencies", "devDependencies"]

    def test_write_preserves_indent_and_order(self, tmp_path):
        path = write_package(tmp_path / "package.json", indent=4)
        manifest = read_manifest(str(path))
        entry = next(manifest.entries(["dependencies"]))
        manifest.set_version(entry, "18.3.1")
        write_manifest(manifest)

        text = path.read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert '\n    "name": "app"' in text
        data = json.loads(text)
        assert data["dependencies"] == {"react": "18.3.1", "lodash": "4.17.20"}
        assert list(data) == list(PACKAGE)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text("{ nope", encoding="utf-8")
        with pytest.raises(ManifestError):
            read_manifest(str(path))

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ManifestError):
            read_manifest(str(path))
