import logging

import pytest

from storyformat.utils.ini_reader import IniReader, DuplicateKeyStrategy


class FakeMeasurer:
    """
    Deterministic TextMeasurer: every character is one unit wide, spaces and
    tabs included, whatever the font.
    """
    def __init__(self):
        self.opened = 0
        self.closed = 0
        self.calls = []

    def open(self):
        self.opened += 1

    def close(self):
        self.closed += 1

    def measure(self, text, font):
        self.calls.append((text, font))
        return float(len(text))


TEST_INI = """\
; test configuration
WrapAfterCharacters=10
ItalicPrefix=/
IgnoreLinePrefix=#
EndOnPrefix=END

[replace]
--=—

[test]
Render=true
LeadTabVal=>>
TabVal=~
NonBreakableSpace=&nbsp;
TagFontOpen=<font {0}>
TagFontClose=</font>
TagSizeOpen=<s{0}>
TagSizeClose=</s>
TagBreak=<br>
TagItalicOpen=<i>
TagItalicClose=</i>

[other]
Render=no
TagBreak=<p>
"""


@pytest.fixture
def measurer():
    return FakeMeasurer()


@pytest.fixture
def make_ini():
    """Builds an IniReader from text; keyword arguments override global options."""
    def factory(text=TEST_INI, **globals_):
        header = "".join(f"{key}={value}\n" for key, value in globals_.items())
        # Earlier keys win, so the overrides shadow the defaults below them
        return IniReader.from_string(header + text, duplicate_key=DuplicateKeyStrategy.IGNORE)
    return factory


@pytest.fixture(autouse=True)
def _quiet_logger():
    """Keep handlers added by tests from leaking into other tests."""
    yield
    logger = logging.getLogger("story_formatter")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
