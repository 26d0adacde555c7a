"""
The main formatting pipeline (Facade).

This module checks the inputs, loads the configuration and drives the
StoryRenderer once per output section, writing each result next to the story.
"""
import logging
import re
from pathlib import Path

from ..utils.config import FormatterConfig, REPLACE_SECTION
from ..utils.config_accessor import ConfigAccessor
from ..utils.ini_reader import (
    IniReader,
    InvalidSectionStrategy,
    DuplicateSectionStrategy,
    DuplicateKeyStrategy,
    GLOBAL_SECTION,
)
from .font_metrics import PillowTextMeasurer, TextMeasurer
from .story_renderer import StoryRenderer


log = logging.getLogger("story_formatter")

LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class StoryValidationError(Exception):
    """An input problem the user has to fix; the message is shown as is."""


def read_story(path: Path) -> list[str]:
    """Reads a story as UTF-8; a final line break does not add an empty line."""
    text = path.read_text(encoding="utf-8-sig")
    lines = LINE_BREAK_RE.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def find_upwards(directory: Path, file_name: str) -> Path | None:
    """Returns the first `file_name` found in `directory` or one of its parents."""
    for folder in (directory, *directory.parents):
        candidate = folder / file_name
        if candidate.is_file():
            return candidate
    return None


class FormattingPipeline:
    """
    A facade that simplifies the formatting process.

    The UI layer (CLI or GUI) interacts with this class to run a conversion.
    It coordinates validation, configuration loading, rendering and writing.
    """

    def __init__(self, config: FormatterConfig, measurer: TextMeasurer | None = None):
        """Initializes the pipeline with a specific configuration."""
        self.config = config
        self.measurer = measurer


    # --- Inputs ---

    def locate_ini(self, story_path: Path) -> Path | None:
        if self.config.ini_path is not None:
            return self.config.ini_path if self.config.ini_path.is_file() else None
        story_dir = story_path.resolve().parent
        if self.config.search_parent_dirs:
            return find_upwards(story_dir, self.config.ini_name)
        candidate = story_dir / self.config.ini_name
        return candidate if candidate.is_file() else None


    def validate(self, story_path: Path) -> tuple[list[str], Path]:
        """
        Checks the story and its configuration file.

        Returns:
            tuple[list[str], Path]: the story lines and the ini file path.
        Raises:
            StoryValidationError: with a message meant for the user.
        """
        if not story_path.is_file():
            raise StoryValidationError(
                f"Cannot find: {story_path}\n"
                "Please specify a text file to format on the command line."
            )

        ini_path = self.locate_ini(story_path)
        if ini_path is None:
            raise StoryValidationError(
                f"{self.config.ini_name} file missing from path: {story_path.resolve().parent}\n"
                f"Please provide a {self.config.ini_name} file in the same directory as your story."
            )

        max_bytes = self.config.max_file_size_kb * 1024
        if story_path.stat().st_size > max_bytes:
            raise StoryValidationError(
                f"File too large: {story_path}\n"
                f"Please specify a text file no larger than {self.config.max_file_size_kb}Kb."
            )

        try:
            lines = read_story(story_path)
        except UnicodeDecodeError as e:
            raise StoryValidationError(
                f"Cannot read: {story_path}\n"
                f"Please save the story as UTF-8 text ({e.reason} at byte {e.start})."
            ) from e
        if len(lines) > self.config.max_lines:
            raise StoryValidationError(
                f"File has too many lines: {story_path}\n"
                f"Please specify a text file with no more than {self.config.max_lines} lines."
            )

        return lines, ini_path


    @staticmethod
    def load_ini(ini_path: Path) -> IniReader:
        return IniReader(
            ini_path,
            invalid_section=InvalidSectionStrategy.MERGE,
            duplicate_section=DuplicateSectionStrategy.MERGE,
            duplicate_key=DuplicateKeyStrategy.REPLACE,
        )


    @staticmethod
    def section_flags(ini: IniReader) -> list[tuple[str, bool]]:
        """Named output sections with their `Render` flag, in file order."""
        accessor = ConfigAccessor(ini)
        return [
            (name, bool(accessor.get_bool(name, "Render")))
            for name in ini.section_names()
            if name.lower() not in (GLOBAL_SECTION, REPLACE_SECTION)
        ]


    def sections_to_render(self, ini: IniReader) -> list[str]:
        """
        Named sections flagged with `Render`, in file order.
        Sections requested in the config are rendered regardless of the flag.
        """
        if self.config.sections:
            return list(self.config.sections)
        return [name for name, render in self.section_flags(ini) if render]


    def output_path(self, story_path: Path, section: str) -> Path:
        folder = self.config.output_dir or story_path.parent
        return folder / f"{story_path.stem}.{section}"


    # --- Run ---

    def run(self, story_path: Path) -> list[Path]:
        """
        Executes the full formatting for a single story.
        Returns the written files in render order.
        """
        lines, ini_path = self.validate(story_path)
        log.info(f"Formatting {story_path.name} ({len(lines)} lines) with {ini_path}")

        ini = self.load_ini(ini_path)
        sections = self.sections_to_render(ini)
        if not sections:
            log.warning(f"No section in {ini_path.name} is marked with Render=true.")
            return []

        if self.config.output_dir is not None:
            self.config.output_dir.mkdir(parents=True, exist_ok=True)

        measurer = self.measurer or PillowTextMeasurer(self.config.font_path)
        written = []
        with StoryRenderer(ini, measurer, newline=self.config.newline) as renderer:
            for section in sections:
                result = renderer.render(lines, section)
                target = self.output_path(story_path, section)
                # newline="" keeps the configured line terminator untouched
                with open(target, "w", encoding="utf-8", newline="") as f:
                    f.write(result)
                log.info(f"Wrote section [{section}] to {target}")
                written.append(target)

        return written
