"""Report colors for the mssearch console.

The bundled ``data/theme.toml`` holds the defaults; any subset of its
``[colors]`` entries can be overridden in ``~/.config/mssearch/theme.toml``.
"""

import logging
import re
import tomllib
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from mssearch.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")


class ThemeColors(BaseModel):
    """Hex colors for every style the report uses."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    match_content: str = "#c1ff62"
    match_metadata: str = "#0e8ac8"
    match_configuration: str = "#d44ebc"
    url: str = "#0ec1c8"
    hint: str = "#faf870"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex(cls, v: object) -> str:
        """Accept only #RGB or #RRGGBB strings."""
        color = v.strip() if isinstance(v, str) else ""
        if not _HEX_COLOR.fullmatch(color):
            msg = f"expected a #RGB or #RRGGBB color, got {v!r}"
            raise ValueError(msg)
        return color


def _read_colors(path: Path) -> dict[str, str]:
    """Read the ``[colors]`` table of a theme file; empty if unusable."""
    try:
        with open(path, "rb") as f:
            colors = tomllib.load(f).get("colors", {})
    except FileNotFoundError:
        return {}
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}
    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return {}
    return {str(k): v for k, v in colors.items() if isinstance(v, str)}


def load_colors(user_path: Path | None = None) -> ThemeColors:
    """Merge the bundled colors with the user's overrides.

    Args:
        user_path: Override file (default: ~/.config/mssearch/theme.toml).

    Returns:
        Validated colors; the defaults if the merged set is invalid.
    """
    bundled = Path(str(resources.files("mssearch.data").joinpath("theme.toml")))
    merged = {**_read_colors(bundled), **_read_colors(user_path or get_user_theme_path())}
    try:
        return ThemeColors(**merged)
    except ValidationError as e:
        logger.warning("Invalid theme colors, using defaults: %s", e)
        return ThemeColors()


def build_theme(colors: ThemeColors) -> Theme:
    """Map colors to the Rich style names used in markup."""
    styles = colors.model_dump()
    styles.update(
        error=f"bold {colors.error}",
        url=f"underline {colors.url}",
        bold_header=f"bold {colors.header}",
    )
    return Theme(styles)


_theme: Theme | None = None


def get_theme() -> Theme:
    """Return the process-wide Rich theme, loading it on first use."""
    global _theme
    if _theme is None:
        _theme = build_theme(load_colors())
    return _theme
