"""
Greedy word wrap driven by measured text widths.
"""
from collections.abc import Callable

from .line_classifier import LineState
from .words import consume_word


class WrapEngine:
    """
    Splits a line into sub-lines no wider than `wrap_after_width`.

    The first word of a line is always accepted, so a single word wider than
    the limit ends up alone on its own sub-line instead of being split.
    The leading width of the line state only counts against the first
    sub-line.

    Args:
        measure: returns the width of a string in the paragraph font.
        wrap_after_width: maximum width of a sub-line; a fit is `<=`.
    """

    def __init__(self, measure: Callable[[str], float], wrap_after_width: float):
        self.measure = measure
        self.wrap_after_width = wrap_after_width


    def wrap(self, state: LineState) -> list[str]:
        """Returns the sub-lines of `state.remaining_text`, tabs not yet expanded."""
        sub_lines: list[str] = []
        leading_width = state.leading_width
        remaining = state.remaining_text

        candidate = ""
        previous = ""
        first_word = True

        while remaining:
            word, remaining = consume_word(remaining)
            candidate += word
            current = candidate.rstrip()

            if first_word:
                previous = current
                first_word = False
                continue

            if leading_width + self.measure(current) <= self.wrap_after_width:
                previous = current
                continue

            # Flush and start over with the rejected word
            sub_lines.append(previous)
            candidate = word.lstrip()
            previous = candidate.rstrip()
            leading_width = 0.0

        sub_lines.append(previous)
        return sub_lines
