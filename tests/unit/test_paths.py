"""Tests for font roots and source classification."""

from pathlib import Path

from fontfinder.core.models import FontRoot
from fontfinder.fonts.paths import (
    classify_source,
    default_font_roots,
    mobile_asset_font_roots,
)


class TestDefaultFontRoots:
    """Test platform font directories."""

    def test_macos(self):
        roots = default_font_roots("Darwin")

        assert [(r.path, r.source) for r in roots[:2]] == [
            ("/System/Library/Fonts", "system"),
            ("/Library/Fonts", "library"),
        ]
        assert roots[2].path == str(Path.home() / "Library" / "Fonts")
        assert roots[2].source == "user"

    def test_linux(self):
        roots = default_font_roots("Linux")

        assert roots[0].path == "/usr/share/fonts"
        assert {r.source for r in roots} == {"system", "library", "user"}

    def test_windows(self, monkeypatch):
        monkeypatch.setenv("WINDIR", "C:\\Windows")
        monkeypatch.setenv("LOCALAPPDATA", "C:\\Users\\me\\AppData\\Local")

        roots = default_font_roots("Windows")

        assert [r.source for r in roots] == ["system", "user"]


class TestMobileAssets:
    """Test MobileAsset discovery."""

    def test_lists_font_asset_directories(self, temp_dir):
        (temp_dir / "com_apple_MobileAsset_Font7").mkdir()
        (temp_dir / "com_apple_MobileAsset_Other").mkdir()

        roots = mobile_asset_font_roots(temp_dir)

        assert [Path(r).name for r in roots] == ["com_apple_MobileAsset_Font7"]

    def test_missing_directory(self, temp_dir):
        assert mobile_asset_font_roots(temp_dir / "missing") == []


class TestClassifySource:
    """Test classify_source."""

    roots = [
        FontRoot(path="/Library/Fonts", source="library"),
        FontRoot(path="/Library/Fonts/User", source="user"),
    ]

    def test_longest_root_wins(self):
        assert classify_source("/Library/Fonts/a.ttf", self.roots) == "library"
        assert classify_source("/Library/Fonts/User/a.ttf", self.roots) == "user"

    def test_prefix_must_be_a_directory(self):
        assert classify_source("/Library/FontsExtra/a.ttf", self.roots) == "other"

    def test_mobile_assets_are_system(self):
        path = "/System/Library/AssetsV2/com_apple_MobileAsset_Font7/abc/AssetData/X.ttc"
        assert classify_source(path, self.roots) == "system"
