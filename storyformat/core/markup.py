"""
Builds the tagged markup of a rendered story from section directives.
"""
import logging

from ..utils.config import SectionDirectives


log = logging.getLogger("story_formatter")


def format_tag(template: str, value) -> str:
    """
    Fills the `{0}` placeholder of a tag template.
    A template that does not format is used as is.
    """
    try:
        return template.format(value)
    except (IndexError, KeyError, ValueError, AttributeError, TypeError) as e:
        log.warning(f"Cannot format tag template {template!r} with {value!r}: {e}")
        return template


class MarkupAssembler:
    """
    Pure string assembly of line fragments and the document frame.
    No measuring happens here.
    """

    def __init__(self, directives: SectionDirectives, newline: str = "\n"):
        self.directives = directives
        self.newline = newline
        self.tag_break = directives.tag_break + newline

    def size_open(self, size: int) -> str:
        return format_tag(self.directives.tag_size_open, size)

    def size_close(self) -> str:
        return self.directives.tag_size_close

    def lead_tab(self, size: int) -> str:
        """Markup replacing a lead tab, rendered at its own font size."""
        return self.size_open(size) + self.directives.lead_tab_val + self.size_close()

    def expand_tabs(self, text: str) -> str:
        return text.replace("\t", self.directives.tab_val)


    # --- Line fragments ---

    def empty_line(self, open_tag: str, close_tag: str) -> str:
        return open_tag + self.directives.non_breakable_space + close_tag + self.tag_break

    def text_line(self, lead_markup: str, open_tag: str, close_tag: str, sub_lines: list[str]) -> str:
        """
        Every sub-line ends with a break; only the last one carries the
        closing tag, in front of its break.
        """
        parts = [lead_markup, open_tag]
        for sub_line in sub_lines[:-1]:
            parts.append(self.expand_tabs(sub_line))
            parts.append(self.tag_break)
        parts.append(self.expand_tabs(sub_lines[-1] if sub_lines else ""))
        parts.append(close_tag)
        parts.append(self.tag_break)
        return "".join(parts)


    # --- Document frame ---

    def compose(self, font_family: str, fragments: list[str]) -> str:
        """Header, font tag, line fragments, closing font tag, footer."""
        parts = []
        if self.directives.header:
            parts.append(self.directives.header)
        parts.append(format_tag(self.directives.tag_font_open, font_family))
        parts.append(self.newline)
        parts.extend(fragments)
        parts.append(self.directives.tag_font_close)
        parts.append(self.newline)
        if self.directives.footer:
            parts.append(self.directives.footer)
        return "".join(parts)
