"""
Defines configuration and settings for the formatting process.
"""
from dataclasses import dataclass
from pathlib import Path

from .config_accessor import ConfigAccessor


REPLACE_SECTION = "replace"
DEFAULT_INI_NAME = "StoryFormatter.ini"


@dataclass
class FormatterConfig:
    """
    A container for all settings of the host shell.
    This object is created by the UI (CLI or GUI) and passed to the FormattingPipeline.
    """
    ini_name: str = DEFAULT_INI_NAME
    ini_path: Path | None = None        # explicit ini, overrides ini_name lookup
    search_parent_dirs: bool = False    # look for the ini in parent folders too
    output_dir: Path | None = None      # None means next to the story
    sections: tuple[str, ...] = ()      # empty means "every section with Render=true"
    font_path: Path | None = None       # TrueType file used for all measurements
    max_file_size_kb: int = 250
    max_lines: int = 10000
    newline: str = "\n"


@dataclass(frozen=True)
class RenderConfig:
    """
    Global render options, resolved once per render session.
    Sizes are percentages of the site's base font size, not pixels.
    """
    wrap_after_characters: int = 92     # 0 disables wrapping
    paragraph_size: int = 112
    lead_tab_size: int = 165
    lead_tab_spaces: int = 3
    tab_spaces: int = 3
    font_family: str = "Verdana"
    end_on: str | None = None           # read as is, rendering stops on EndOnPrefix only

    @classmethod
    def from_accessor(cls, accessor: ConfigAccessor) -> "RenderConfig":
        defaults = cls()

        def int_option(key, default):
            value = accessor.get_int(None, key)
            return default if value is None else value

        font_family = accessor.get_string(None, "FontFamily")
        return cls(
            wrap_after_characters=int_option("WrapAfterCharacters", defaults.wrap_after_characters),
            paragraph_size=int_option("ParagraphSize", defaults.paragraph_size),
            lead_tab_size=int_option("LeadTabSize", defaults.lead_tab_size),
            lead_tab_spaces=int_option("LeadTabSpaces", defaults.lead_tab_spaces),
            tab_spaces=int_option("TabSpaces", defaults.tab_spaces),
            font_family=defaults.font_family if font_family is None else font_family,
            end_on=accessor.get_string(None, "EndOn"),
        )

    @property
    def wrapping_enabled(self) -> bool:
        return self.wrap_after_characters != 0


@dataclass(frozen=True)
class GlobalDirectives:
    """Line classification prefixes and the ordered `[replace]` table."""
    italic_prefix: str = ""
    ignore_line_prefix: str = ""
    end_on_prefix: str = ""
    replacements: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_accessor(cls, accessor: ConfigAccessor) -> "GlobalDirectives":
        replacements = tuple(
            (find, replace)
            for find, replace in accessor.section(REPLACE_SECTION).items()
            if find
        )
        return cls(
            italic_prefix=accessor.get_string(None, "ItalicPrefix") or "",
            ignore_line_prefix=accessor.get_string(None, "IgnoreLinePrefix") or "",
            end_on_prefix=accessor.get_string(None, "EndOnPrefix") or "",
            replacements=replacements,
        )


@dataclass(frozen=True)
class SectionDirectives:
    """
    Markup literals of one output variant (one INI section).
    Missing directives resolve to the empty string.
    """
    lead_tab_val: str = ""
    tab_val: str = ""
    non_breakable_space: str = ""
    tag_font_open: str = ""     # template, {0} = font family
    tag_font_close: str = ""
    tag_size_open: str = ""     # template, {0} = size
    tag_size_close: str = ""
    tag_break: str = ""
    tag_italic_open: str = ""
    tag_italic_close: str = ""
    header: str = ""
    footer: str = ""
    render: bool = False

    # INI key for each field
    KEYS = {
        "lead_tab_val": "LeadTabVal",
        "tab_val": "TabVal",
        "non_breakable_space": "NonBreakableSpace",
        "tag_font_open": "TagFontOpen",
        "tag_font_close": "TagFontClose",
        "tag_size_open": "TagSizeOpen",
        "tag_size_close": "TagSizeClose",
        "tag_break": "TagBreak",
        "tag_italic_open": "TagItalicOpen",
        "tag_italic_close": "TagItalicClose",
        "header": "Header",
        "footer": "Footer",
    }

    @classmethod
    def from_accessor(cls, accessor: ConfigAccessor, section: str) -> "SectionDirectives":
        values = {
            name: accessor.get_string(section, key) or ""
            for name, key in cls.KEYS.items()
        }
        return cls(**values, render=accessor.get_bool(section, "Render") or False)
