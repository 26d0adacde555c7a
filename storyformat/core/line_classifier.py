"""
Classifies story lines before they are wrapped.

Rules are evaluated top to bottom. The first three decide a line's fate on
their own (ignored, end of story, empty); the remaining ones only transform
a text line (italic prefix, lead tab) and hand it on to the word wrap.
"""
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum, auto

from ..utils.config import GlobalDirectives


LEAD_TAB = "\t"


class LineKind(Enum):
    IGNORED = auto()    # produces no output
    TERMINAL = auto()   # stops rendering of the whole story
    EMPTY = auto()      # rendered as a non-breakable space
    TEXT = auto()       # rendered through the word wrap


@dataclass
class LineState:
    """Transient state of one story line while it is being rendered."""
    remaining_text: str
    open_tag: str
    close_tag: str
    leading_width: float = 0.0  # width already taken by markup that is not measured
    lead_markup: str = ""       # emitted before the opening tag


@dataclass
class ClassifiedLine:
    kind: LineKind
    state: LineState


def apply_replacements(line: str, replacements: Iterable[tuple[str, str]]) -> str:
    """
    Applies literal find/replace pairs in order.

    Applying the table twice gives the same result as once only if no
    replacement produces text another pattern matches; keeping it that way is
    up to whoever writes the configuration.
    """
    for find, replace in replacements:
        if find:
            line = line.replace(find, replace)
    return line


class LineClassifier:
    """
    Turns raw story lines into ClassifiedLine objects for one output variant.

    Args:
        directives: global prefixes and the replace table.
        paragraph_tags: (open, close) pair for regular text.
        italic_tags: (open, close) pair used when the italic prefix matches.
        lead_tab_markup: markup emitted in place of a single leading tab.
        lead_tab_width: measured width the lead tab takes from the first sub-line.
    """

    def __init__(self,
                 directives: GlobalDirectives,
                 paragraph_tags: tuple[str, str],
                 italic_tags: tuple[str, str],
                 lead_tab_markup: str,
                 lead_tab_width: float):
        self.directives = directives
        self.paragraph_tags = paragraph_tags
        self.italic_tags = italic_tags
        self.lead_tab_markup = lead_tab_markup
        self.lead_tab_width = lead_tab_width

        self._fate_rules: tuple[tuple[Callable[[str], bool], LineKind], ...] = (
            (self._is_ignored, LineKind.IGNORED),
            (self._is_terminal, LineKind.TERMINAL),
            (self._is_empty, LineKind.EMPTY),
        )


    def classify(self, original: str) -> ClassifiedLine:
        text = apply_replacements(original, self.directives.replacements)
        open_tag, close_tag = self.paragraph_tags
        state = LineState(text, open_tag, close_tag)

        for matches, kind in self._fate_rules:
            if matches(text):
                return ClassifiedLine(kind, state)

        line = ClassifiedLine(LineKind.TEXT, state)
        self._apply_italic(line)
        self._apply_lead_tab(line)
        return line


    # --- Fate rules ---

    def _is_ignored(self, text: str) -> bool:
        prefix = self.directives.ignore_line_prefix
        return bool(prefix) and text.startswith(prefix)

    def _is_terminal(self, text: str) -> bool:
        prefix = self.directives.end_on_prefix
        return bool(prefix) and text.startswith(prefix)

    def _is_empty(self, text: str) -> bool:
        return text == ""


    # --- Transforms ---

    def _apply_italic(self, line: ClassifiedLine):
        prefix = self.directives.italic_prefix
        state = line.state
        if not prefix or not state.remaining_text.startswith(prefix):
            return
        state.open_tag, state.close_tag = self.italic_tags
        state.remaining_text = state.remaining_text[len(prefix):]

    def _apply_lead_tab(self, line: ClassifiedLine):
        # Only one tab is consumed, further tabs stay part of the text
        state = line.state
        if not state.remaining_text.startswith(LEAD_TAB):
            return
        state.lead_markup = self.lead_tab_markup
        state.leading_width += self.lead_tab_width
        state.remaining_text = state.remaining_text[len(LEAD_TAB):]
