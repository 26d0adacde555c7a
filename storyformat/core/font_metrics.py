"""
Font descriptors, text width measurement and the per-session reference widths
the word wrap is driven by.
"""
import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from PIL import ImageFont

from ..utils.config import RenderConfig


log = logging.getLogger("story_formatter")

# The site's base font size is 10pt, which converts to 0.8em.
# Configured sizes are a percentage on top of that.
BASE_FONT_EM = 0.8
# Browsers render 1em as 16px
PIXELS_PER_EM = 16
# Wrap width is the width of this glyph repeated `wrap_after_characters` times
REFERENCE_GLYPH = "0"

FONT_EXTENSIONS = (".ttf", ".otf", ".ttc")


@dataclass(frozen=True)
class FontDescriptor:
    family: str
    size_em: float

    @classmethod
    def from_size(cls, family: str, size: int) -> "FontDescriptor":
        return cls(family, BASE_FONT_EM * (size / 100.0))

    @property
    def size_px(self) -> float:
        return self.size_em * PIXELS_PER_EM


class TextMeasurer(Protocol):
    """
    Measures rendered text widths. Trailing spaces must count towards the width.
    `open()` / `close()` bracket the lifetime of any native resources.
    """
    def open(self) -> None:
        ...

    def close(self) -> None:
        ...

    def measure(self, text: str, font: FontDescriptor) -> float:
        ...


def system_font_dirs() -> list[Path]:
    """Returns the usual font folders of the running platform."""
    home = Path.home()
    match platform.system():
        case "Windows":
            windir = Path(os.environ.get("WINDIR", "C:/Windows"))
            dirs = [windir / "Fonts", home / "AppData/Local/Microsoft/Windows/Fonts"]
        case "Darwin":
            dirs = [Path("/Library/Fonts"), Path("/System/Library/Fonts"), home / "Library/Fonts"]
        case _:
            dirs = [Path("/usr/share/fonts"), Path("/usr/local/share/fonts"),
                    home / ".fonts", home / ".local/share/fonts"]
    return [d for d in dirs if d.is_dir()]


class PillowTextMeasurer:
    """
    A TextMeasurer backed by Pillow's FreeType bindings.

    Font families are resolved to font files by name: an explicit `font_path`
    wins, then `<family>.ttf` (or .otf/.ttc) is looked up in `font_dirs`,
    and finally Pillow's bundled default font is used.
    """

    def __init__(self, font_path: Path | None = None, font_dirs: list[Path] | None = None):
        self.font_path = font_path
        self.font_dirs = system_font_dirs() if font_dirs is None else font_dirs
        self._fonts: dict[FontDescriptor, ImageFont.FreeTypeFont | ImageFont.ImageFont] | None = None
        self._files: dict[str, Path | None] = {}

    @property
    def is_open(self) -> bool:
        return self._fonts is not None

    def open(self):
        if self._fonts is None:
            self._fonts = {}

    def close(self):
        self._fonts = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


    def measure(self, text: str, font: FontDescriptor) -> float:
        # getlength() sums glyph advances, so trailing spaces are counted
        return float(self._get_font(font).getlength(text))


    def _get_font(self, font: FontDescriptor):
        if self._fonts is None:
            raise RuntimeError("PillowTextMeasurer used outside of open()/close().")
        if font not in self._fonts:
            self._fonts[font] = self._load_font(font)
        return self._fonts[font]


    def _load_font(self, font: FontDescriptor):
        path = self.font_path or self.find_font_file(font.family)
        if path is not None:
            log.debug(f"Loading font {font.family} ({font.size_px:.2f}px) from {path}")
            return ImageFont.truetype(str(path), font.size_px)

        log.warning(f"Font '{font.family}' not found, measuring with Pillow's default font.")
        return ImageFont.load_default(font.size_px)


    def find_font_file(self, family: str) -> Path | None:
        """Finds `<family>.ttf` (case-insensitive) in the font folders."""
        if family in self._files:
            return self._files[family]

        wanted = {f"{family}{ext}".casefold() for ext in FONT_EXTENSIONS}
        found = None
        for font_dir in self.font_dirs:
            found = next((p for p in font_dir.rglob("*") if p.name.casefold() in wanted), None)
            if found is not None:
                break

        self._files[family] = found
        return found


class FontMetrics:
    """
    Session-scoped font cache: the paragraph and lead-tab fonts plus the
    reference widths measured with them.

    Use as a context manager; the measurer is opened on enter and always
    closed on exit.
    """

    def __init__(self, config: RenderConfig, measurer: TextMeasurer):
        self.config = config
        self.measurer = measurer

        self.tab_width_val = " " * config.tab_spaces
        self.paragraph_font = FontDescriptor.from_size(config.font_family, config.paragraph_size)
        self.lead_tab_font = FontDescriptor.from_size(config.font_family, config.lead_tab_size)
        self.lead_tab_width = 0.0
        self.wrap_after_width = 0.0

    def __enter__(self):
        self.measurer.open()
        try:
            self._measure_references()
        except Exception:
            self.measurer.close()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self.measurer.close()


    def _measure_references(self):
        self.lead_tab_width = self.measurer.measure(" " * self.config.lead_tab_spaces, self.lead_tab_font)

        # Measuring the whole run of glyphs keeps any padding the measurer adds
        # out of the per-character arithmetic
        if self.config.wrapping_enabled:
            self.wrap_after_width = self.measure_paragraph(REFERENCE_GLYPH * self.config.wrap_after_characters)
        else:
            self.wrap_after_width = 0.0

        log.debug(
            "Font metrics: paragraph %s, lead tab %s, lead tab width %.2f, wrap width %.2f",
            self.paragraph_font, self.lead_tab_font, self.lead_tab_width, self.wrap_after_width,
        )


    def measure_paragraph(self, text: str) -> float:
        """Width of `text` in the paragraph font, tabs counted as `tab_spaces` spaces."""
        return self.measurer.measure(text.replace("\t", self.tab_width_val), self.paragraph_font)
