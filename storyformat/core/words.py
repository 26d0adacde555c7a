"""
Splits the remainder of a line into its next word and the rest.
"""
from enum import Enum, auto


class _ScanState(Enum):
    LEADING_SPACE = auto()  # looking for the start of a word
    IN_WORD = auto()        # looking for the end of the word
    SEPARATOR = auto()      # looking for the start of the next word


def consume_word(line: str) -> tuple[str, str]:
    """
    Returns `(word, rest)` such that `word + rest == line`.

    `word` holds any leading whitespace plus the first run of non-whitespace.
    `rest` starts at the whitespace separating it from the next word. When no
    further word follows, the whole line is the word and `rest` is empty, so
    a trailing run of spaces (or a line of only spaces) is never split off.
    """
    state = _ScanState.LEADING_SPACE
    word_end = 0

    for i, char in enumerate(line):
        match state:
            case _ScanState.LEADING_SPACE:
                if not char.isspace():
                    state = _ScanState.IN_WORD
            case _ScanState.IN_WORD:
                if char.isspace():
                    state = _ScanState.SEPARATOR
                    word_end = i
            case _ScanState.SEPARATOR:
                if not char.isspace():
                    return line[:word_end], line[word_end:]

    return line, ""
