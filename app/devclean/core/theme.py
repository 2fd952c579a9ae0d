"""Risk palette and Rich theme for the devclean CLI.

The palette ships in ``devclean/data/theme.toml``. A ``theme.toml`` in the
config directory may override any subset of it:

    [palette]
    critical = "#ff0000"
    burner = "#00aa00"

Rows in the scan table are colored by risk class, so the palette is
mostly about Critical / Active / Burner and cache entries.
"""

import functools
import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationError
from rich.theme import Theme

from devclean.core.paths import get_config_dir

logger = logging.getLogger(__name__)

THEME_FILENAME = "theme.toml"


def _check_hex(value: str) -> str:
    digits = value.removeprefix("#")
    if not value.startswith("#") or len(digits) not in (3, 6):
        msg = f"expected #RGB or #RRGGBB, got {value!r}"
        raise ValueError(msg)
    try:
        int(digits, 16)
    except ValueError:
        msg = f"not a hex color: {value!r}"
        raise ValueError(msg) from None
    return value


HexColor = Annotated[str, AfterValidator(_check_hex)]


class Palette(BaseModel):
    """Colors used by the CLI, keyed by what they paint."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    critical: HexColor = "#f53263"
    active: HexColor = "#faf870"
    burner: HexColor = "#03b971"
    cache: HexColor = "#0e8ac8"

    text: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"

    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"


# Rich style name -> (palette color, extra style attributes)
STYLES: dict[str, tuple[str, str]] = {
    "risk.critical": ("critical", "bold"),
    "risk.active": ("active", ""),
    "risk.burner": ("burner", ""),
    "cache": ("cache", ""),
    "text": ("text", ""),
    "muted": ("muted", ""),
    "dim": ("muted", ""),
    "header": ("header", ""),
    "bold_header": ("header", "bold"),
    "border": ("border", ""),
    "success": ("success", ""),
    "warning": ("warning", ""),
    "error": ("error", "bold"),
    "info": ("info", ""),
}


def user_theme_path() -> Path:
    """Location of the optional palette override file."""
    return get_config_dir() / THEME_FILENAME


def read_palette_file(path: Path) -> dict[str, object]:
    """Read the ``[palette]`` table of a theme file.

    A missing file yields an empty table. Unreadable files and files that
    are not valid TOML are logged and also yield an empty table.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    table = data.get("palette", {})
    if not isinstance(table, dict):
        logger.warning("Ignoring theme file %s: [palette] is not a table", path)
        return {}
    return {str(key): value for key, value in table.items()}


def load_palette(override: Path | None = None) -> Palette:
    """Build the palette from the bundled file and the user override.

    An override that fails validation is dropped as a whole and the
    bundled palette is used.

    Args:
        override: Override file. Defaults to ``user_theme_path()``.
    """
    bundled_file = resources.files("devclean.data").joinpath(THEME_FILENAME)
    with resources.as_file(bundled_file) as bundled_path:
        bundled = read_palette_file(bundled_path)

    override_path = override if override is not None else user_theme_path()
    user = read_palette_file(override_path)
    if user:
        try:
            return Palette.model_validate({**bundled, **user})
        except ValidationError as e:
            logger.warning("Invalid colors in %s, using bundled palette: %s", override_path, e)

    try:
        return Palette.model_validate(bundled)
    except ValidationError as e:
        logger.error("Bundled palette is invalid: %s", e)
        return Palette()


def build_theme(palette: Palette) -> Theme:
    """Turn a palette into the Rich theme used by the consoles."""
    styles: dict[str, str] = {}
    for name, (color_field, attributes) in STYLES.items():
        color = getattr(palette, color_field)
        styles[name] = f"{attributes} {color}".strip()
    return Theme(styles)


@functools.cache
def get_theme() -> Theme:
    """Rich theme for the shared consoles, built on first use."""
    return build_theme(load_palette())
