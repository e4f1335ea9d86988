"""清单文件定位与读取单元测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from dpnd.core.exceptions import InvalidEntrySpecError, ManifestNotFoundError, ManifestReadError
from dpnd.core.manifest_io import find_manifest, load_manifest


class TestFindManifest:
    def test_in_start_dir(self, tmp_path: Path) -> None:
        (tmp_path / "dpnd.txt").write_text("deps\n", encoding="utf-8")
        assert find_manifest(tmp_path, "dpnd.txt") == (tmp_path / "dpnd.txt").resolve()

    def test_nearest_ancestor_wins(self, tmp_path: Path) -> None:
        (tmp_path / "dpnd.txt").write_text("outer\n", encoding="utf-8")
        inner = tmp_path / "proj"
        (inner / "src/pkg").mkdir(parents=True)
        (inner / "dpnd.txt").write_text("inner\n", encoding="utf-8")

        found = find_manifest(inner / "src/pkg", "dpnd.txt")
        assert found == (inner / "dpnd.txt").resolve()

    def test_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestNotFoundError):
            find_manifest(tmp_path, "no-such-manifest-name.txt")


class TestLoadManifest:
    def test_base_dir_is_manifest_dir(self, tmp_path: Path) -> None:
        path = tmp_path / "dpnd.txt"
        path.write_text("deps\nx git u v\n", encoding="utf-8")
        loaded = load_manifest(path)
        assert loaded.base_dir == tmp_path
        assert loaded.manifest.names() == ["x"]

    def test_not_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "dpnd.txt"
        path.write_bytes(b"deps\n\xff\xfe bad\n")
        with pytest.raises(ManifestReadError, match="UTF-8"):
            load_manifest(path)

    def test_parse_error_propagates(self, tmp_path: Path) -> None:
        path = tmp_path / "dpnd.txt"
        path.write_text("deps\nbroken line\n", encoding="utf-8")
        with pytest.raises(InvalidEntrySpecError):
            load_manifest(path)
