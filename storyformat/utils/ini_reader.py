"""
A small INI reader with configurable strategies for malformed and repeated
entries.

Sections and keys are case-insensitive but keep the order (and the spelling)
in which they first appear in the file.
"""
import logging
from collections.abc import Iterator, Mapping, MutableMapping
from enum import Enum, auto
from pathlib import Path
from types import MappingProxyType


log = logging.getLogger("story_formatter")

LINE_COMMENT = ";"
SECTION_START = "["
SECTION_END = "]"
VALUE_SPLIT = "="
GLOBAL_SECTION = ""


class IniFormatError(ValueError):
    """Raised when a THROW strategy meets an invalid or duplicate entry."""


class InvalidSectionStrategy(Enum):
    THROW = auto()      # raise on invalid section header
    IGNORE = auto()     # drop the keys of the invalid section
    MERGE = auto()      # add the keys to the previous section


class DuplicateSectionStrategy(Enum):
    THROW = auto()
    IGNORE = auto()     # drop the keys of the repeated section
    MERGE = auto()      # add the keys to the existing section
    REPLACE = auto()    # discard the existing section


class DuplicateKeyStrategy(Enum):
    THROW = auto()
    IGNORE = auto()     # keep the first value
    REPLACE = auto()    # keep the last value


class CaseInsensitiveDict(MutableMapping):
    """
    An insertion ordered mapping with case-insensitive string keys.
    Keys keep the spelling they were first stored with.
    """
    def __init__(self):
        self._data: dict[str, tuple[str, str]] = {}

    def __setitem__(self, key: str, value: str):
        folded = key.lower()
        original = self._data[folded][0] if folded in self._data else key
        self._data[folded] = (original, value)

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()][1]

    def __delitem__(self, key: str):
        del self._data[key.lower()]

    def __contains__(self, key) -> bool:
        return isinstance(key, str) and key.lower() in self._data

    def __iter__(self):
        return (original for original, _ in self._data.values())

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


class IniReader:
    """
    Reads an INI file into ordered, case-insensitive sections.

    The unnamed section before the first header is the global section,
    addressed with `""` or `None`.
    """

    def __init__(self,
                 path: Path | str | None = None,
                 invalid_section: InvalidSectionStrategy = InvalidSectionStrategy.THROW,
                 duplicate_section: DuplicateSectionStrategy = DuplicateSectionStrategy.THROW,
                 duplicate_key: DuplicateKeyStrategy = DuplicateKeyStrategy.THROW,
                 text: str | None = None):
        self.path = Path(path) if path is not None else None
        self.invalid_section = invalid_section
        self.duplicate_section = duplicate_section
        self.duplicate_key = duplicate_key

        self._sections = CaseInsensitiveDict()
        self._sections[GLOBAL_SECTION] = CaseInsensitiveDict()

        if text is None:
            if self.path is None:
                raise TypeError("IniReader needs either a path or text.")
            text = self.path.read_text(encoding="utf-8-sig")
        self._parse(text.splitlines())


    @classmethod
    def from_string(cls, text: str, **strategies) -> "IniReader":
        """Builds a reader from INI text instead of a file."""
        return cls(text=text, **strategies)


    def _where(self, index: int) -> str:
        source = self.path if self.path is not None else "<string>"
        return f"[{source}:{index}]"


    def _parse(self, lines: list[str]):
        section = self._sections[GLOBAL_SECTION]

        for index, original_line in enumerate(lines, start=1):
            # Only the start of key lines is trimmed; values keep trailing spaces
            line = original_line.lstrip()
            if not line or line.startswith(LINE_COMMENT):
                continue

            if line.startswith(SECTION_START):
                section = self._open_section(line.rstrip(), section, index)
                continue

            key, _, value = line.partition(VALUE_SPLIT)
            if key not in section:
                section[key] = value
                continue

            match self.duplicate_key:
                case DuplicateKeyStrategy.THROW:
                    raise IniFormatError(f"{self._where(index)} Duplicate key specification.")
                case DuplicateKeyStrategy.IGNORE:
                    continue
                case DuplicateKeyStrategy.REPLACE:
                    section[key] = value


    def _open_section(self, header: str, current: CaseInsensitiveDict, index: int) -> CaseInsensitiveDict:
        """Returns the section that following keys are written into."""
        if not header.endswith(SECTION_END):
            match self.invalid_section:
                case InvalidSectionStrategy.THROW:
                    raise IniFormatError(f"{self._where(index)} Invalid section specification.")
                case InvalidSectionStrategy.IGNORE:
                    return CaseInsensitiveDict()
                case InvalidSectionStrategy.MERGE:
                    log.debug(f"{self._where(index)} Invalid section header, merging into previous section.")
                    return current

        name = header[1:-1]
        if name not in self._sections:
            self._sections[name] = CaseInsensitiveDict()
            return self._sections[name]

        match self.duplicate_section:
            case DuplicateSectionStrategy.THROW:
                raise IniFormatError(f"{self._where(index)} Duplicate section specification.")
            case DuplicateSectionStrategy.IGNORE:
                return CaseInsensitiveDict()
            case DuplicateSectionStrategy.MERGE:
                return self._sections[name]
            case DuplicateSectionStrategy.REPLACE:
                self._sections[name] = CaseInsensitiveDict()
                return self._sections[name]


    # --- Lookups ---

    def exists(self, section: str | None, key: str | None = None) -> bool:
        section = section or GLOBAL_SECTION
        if section not in self._sections:
            return False
        return key is None or key in self._sections[section]


    def section(self, section: str | None) -> Mapping[str, str]:
        """Returns a read-only, ordered view of a section (empty if missing)."""
        section = section or GLOBAL_SECTION
        if section not in self._sections:
            return MappingProxyType({})
        return MappingProxyType(self._sections[section])


    def get(self, section: str | None, key: str) -> str | None:
        section = section or GLOBAL_SECTION
        if not self.exists(section, key):
            return None
        return self._sections[section][key]


    def section_names(self) -> list[str]:
        return list(self._sections)


    def __getitem__(self, section: str | None) -> Mapping[str, str]:
        return self.section(section)


    def __iter__(self) -> Iterator[tuple[str, Mapping[str, str]]]:
        for name in self._sections:
            yield name, self.section(name)
