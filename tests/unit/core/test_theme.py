"""Unit tests for the risk palette and Rich theme."""

from pathlib import Path

import pytest
from devclean.core.theme import (
    STYLES,
    Palette,
    build_theme,
    get_theme,
    load_palette,
    read_palette_file,
    user_theme_path,
)
from pydantic import ValidationError


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestPalette:
    """Tests for the Palette model."""

    @pytest.mark.parametrize("color", ["#abc", "#A1B2C3"])
    def test_accepts_hex(self, color: str) -> None:
        assert Palette(burner=color).burner == color

    @pytest.mark.parametrize("color", ["green", "#12", "#12345", "#gggggg"])
    def test_rejects_non_hex(self, color: str) -> None:
        with pytest.raises(ValidationError):
            Palette(critical=color)

    def test_unknown_key(self) -> None:
        """Typos in the palette are errors, not silently ignored."""
        with pytest.raises(ValidationError):
            Palette.model_validate({"critcal": "#ff0000"})


class TestReadPaletteFile:
    """Tests for read_palette_file function."""

    def test_reads_palette_table(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "theme.toml", '[palette]\nactive = "#123456"\n')

        assert read_palette_file(path) == {"active": "#123456"}

    def test_missing_file(self, tmp_path: Path) -> None:
        assert read_palette_file(tmp_path / "theme.toml") == {}

    def test_broken_toml_is_logged(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A file that is not TOML is ignored with a warning."""
        path = _write(tmp_path / "theme.toml", "[palette\nactive = ")

        assert read_palette_file(path) == {}
        assert "Ignoring theme file" in caplog.text

    def test_palette_must_be_table(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "theme.toml", 'palette = "dark"\n')

        assert read_palette_file(path) == {}


class TestLoadPalette:
    """Tests for load_palette function."""

    def test_bundled_palette_matches_defaults(self, tmp_path: Path) -> None:
        """The shipped theme.toml carries the same colors as the model."""
        assert load_palette(override=tmp_path / "none.toml") == Palette()

    def test_override_changes_only_given_keys(self, tmp_path: Path) -> None:
        override = _write(tmp_path / "theme.toml", '[palette]\ncritical = "#ff0000"\n')

        palette = load_palette(override=override)

        assert palette.critical == "#ff0000"
        assert palette.burner == Palette().burner

    def test_invalid_override_is_dropped(self, tmp_path: Path) -> None:
        """One bad color discards the whole override."""
        override = _write(
            tmp_path / "theme.toml",
            '[palette]\ncritical = "#ff0000"\nburner = "lime"\n',
        )

        assert load_palette(override=override) == Palette()

    def test_reads_user_theme_by_default(self, isolated_dirs: Path) -> None:
        """Without an explicit override the config directory file is used."""
        assert user_theme_path() == isolated_dirs / ".config" / "devclean" / "theme.toml"
        _write(user_theme_path(), '[palette]\ncache = "#000000"\n')

        assert load_palette().cache == "#000000"


class TestBuildTheme:
    """Tests for build_theme and get_theme."""

    def test_every_style_is_defined(self) -> None:
        theme = build_theme(Palette())

        assert set(STYLES) <= set(theme.styles)

    def test_critical_is_bold(self) -> None:
        theme = build_theme(Palette(critical="#ff0000"))

        style = theme.styles["risk.critical"]
        assert style.bold is True
        assert style.color is not None
        assert style.color.triplet is not None
        assert style.color.triplet.hex == "#ff0000"

    def test_get_theme_is_built_once(self) -> None:
        get_theme.cache_clear()
        try:
            assert get_theme() is get_theme()
        finally:
            get_theme.cache_clear()
