"""
Typed, read-only lookups over the INI configuration store.

Every getter returns None when the key is missing or its value cannot be
parsed, so callers can fall back to their own defaults.
"""
import re
from collections.abc import Mapping

from .ini_reader import IniReader, GLOBAL_SECTION


BOOLEAN_TRUE = ("1", "true", "t", "yes", "y", "ja", "j")
BOOLEAN_FALSE = ("0", "false", "f", "no", "n", "nee")

# Invariant integer format: optional surrounding whitespace and sign, digits only
INTEGER_RE = re.compile(r"^\s*[+-]?[0-9]+\s*$")
INT32_RANGE = range(-2**31, 2**31)


def parse_int(value: str | None) -> int | None:
    if value is None or not INTEGER_RE.match(value):
        return None
    number = int(value)
    return number if number in INT32_RANGE else None


def parse_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    lowered = value.lower()
    if lowered in BOOLEAN_TRUE:
        return True
    if lowered in BOOLEAN_FALSE:
        return False
    return None


class ConfigAccessor:
    """Typed reads over an IniReader. `section=None` is the global section."""

    def __init__(self, store: IniReader):
        if store is None:
            raise TypeError("ConfigAccessor requires a configuration store.")
        self.store = store

    def section(self, section: str | None) -> Mapping[str, str]:
        return self.store.section(section)

    def get_string(self, section: str | None, key: str) -> str | None:
        return self.store.get(section or GLOBAL_SECTION, key)

    def get_int(self, section: str | None, key: str) -> int | None:
        return parse_int(self.get_string(section, key))

    def get_bool(self, section: str | None, key: str) -> bool | None:
        return parse_bool(self.get_string(section, key))
