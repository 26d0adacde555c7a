"""Tests for validation, configuration lookup and output writing."""

from contextlib import contextmanager
from pathlib import Path

import pytest

from storyformat.core.pipeline import (
    FormattingPipeline,
    StoryValidationError,
    find_upwards,
    read_story,
)
from storyformat.resources import loader
from storyformat.resources.loader import load_template_ini, write_template_ini
from storyformat.utils.config import FormatterConfig, DEFAULT_INI_NAME
from storyformat.utils.ini_reader import IniReader

from conftest import TEST_INI


@pytest.fixture
def story_dir(tmp_path) -> Path:
    (tmp_path / DEFAULT_INI_NAME).write_text(TEST_INI, encoding="utf-8")
    return tmp_path


def write_story(folder: Path, text: str, name: str = "story.txt") -> Path:
    path = folder / name
    path.write_bytes(text.encode("utf-8"))
    return path


class TestReadStory:

    def test_all_line_break_styles(self, tmp_path) -> None:
        path = write_story(tmp_path, "one\r\ntwo\rthree\nfour")

        assert read_story(path) == ["one", "two", "three", "four"]

    def test_final_line_break_adds_no_line(self, tmp_path) -> None:
        assert read_story(write_story(tmp_path, "one\n\n")) == ["one", ""]
        assert read_story(write_story(tmp_path, "")) == []

    def test_byte_order_mark_is_dropped(self, tmp_path) -> None:
        assert read_story(write_story(tmp_path, "\ufeffTitle\n")) == ["Title"]


class TestValidation:

    def test_missing_story(self, story_dir) -> None:
        with pytest.raises(StoryValidationError, match="Cannot find"):
            FormattingPipeline(FormatterConfig()).validate(story_dir / "nope.txt")

    def test_missing_ini(self, tmp_path) -> None:
        story = write_story(tmp_path, "text")

        with pytest.raises(StoryValidationError, match="file missing from path"):
            FormattingPipeline(FormatterConfig()).validate(story)

    def test_file_too_large(self, story_dir) -> None:
        story = write_story(story_dir, "x" * 2048)

        with pytest.raises(StoryValidationError, match="File too large"):
            FormattingPipeline(FormatterConfig(max_file_size_kb=1)).validate(story)

    def test_size_limit_is_inclusive(self, story_dir) -> None:
        story = write_story(story_dir, "x" * 1024)

        lines, _ = FormattingPipeline(FormatterConfig(max_file_size_kb=1)).validate(story)

        assert lines == ["x" * 1024]

    def test_too_many_lines(self, story_dir) -> None:
        story = write_story(story_dir, "a\nb\nc\n")

        with pytest.raises(StoryValidationError, match="too many lines"):
            FormattingPipeline(FormatterConfig(max_lines=2)).validate(story)

    def test_not_utf8(self, story_dir) -> None:
        story = story_dir / "story.txt"
        story.write_bytes(b"caf\xe9\n")

        with pytest.raises(StoryValidationError, match="Cannot read"):
            FormattingPipeline(FormatterConfig()).validate(story)

    def test_ini_in_parent_folder(self, story_dir) -> None:
        chapter = story_dir / "part1" / "chapter1"
        chapter.mkdir(parents=True)
        story = write_story(chapter, "text")

        with pytest.raises(StoryValidationError):
            FormattingPipeline(FormatterConfig()).validate(story)

        _, ini_path = FormattingPipeline(FormatterConfig(search_parent_dirs=True)).validate(story)
        assert ini_path == (story_dir / DEFAULT_INI_NAME).resolve()

    def test_explicit_ini_path(self, tmp_path) -> None:
        ini = tmp_path / "custom.ini"
        ini.write_text(TEST_INI, encoding="utf-8")
        story = write_story(tmp_path, "text")

        _, ini_path = FormattingPipeline(FormatterConfig(ini_path=ini)).validate(story)

        assert ini_path == ini

    def test_find_upwards_returns_nearest(self, tmp_path) -> None:
        inner = tmp_path / "a"
        inner.mkdir()
        (tmp_path / "x.ini").write_text("", encoding="utf-8")
        (inner / "x.ini").write_text("", encoding="utf-8")

        assert find_upwards(inner, "x.ini") == inner / "x.ini"
        assert find_upwards(inner, "y.ini") is None


class TestSections:

    def test_render_flags_skip_global_and_replace(self) -> None:
        ini = IniReader.from_string(TEST_INI)

        assert FormattingPipeline.section_flags(ini) == [("test", True), ("other", False)]

    def test_requested_sections_override_flags(self) -> None:
        ini = IniReader.from_string(TEST_INI)

        assert FormattingPipeline(FormatterConfig()).sections_to_render(ini) == ["test"]
        assert FormattingPipeline(FormatterConfig(sections=("other",))).sections_to_render(ini) == ["other"]

    def test_loaded_ini_is_lenient(self, tmp_path) -> None:
        path = tmp_path / DEFAULT_INI_NAME
        path.write_text("A=1\nA=2\n[web]\nX=1\n[broken\nY=2\n[web]\nZ=3\n", encoding="utf-8")

        ini = FormattingPipeline.load_ini(path)

        assert ini.get(None, "A") == "2"
        assert dict(ini["web"]) == {"X": "1", "Y": "2", "Z": "3"}


class TestRun:

    def test_writes_one_file_per_rendered_section(self, story_dir, measurer) -> None:
        story = write_story(story_dir, "alpha beta gamma\n\n# note\n")

        written = FormattingPipeline(FormatterConfig(), measurer).run(story)

        assert written == [story_dir / "story.test"]
        assert written[0].read_text(encoding="utf-8") == (
            "<font Verdana>\n"
            "<s112>alpha beta<br>\ngamma</s><br>\n"
            "<s112>&nbsp;</s><br>\n"
            "</font>\n"
        )
        assert measurer.opened == measurer.closed == 1

    def test_output_dir_and_sections(self, story_dir, measurer) -> None:
        story = write_story(story_dir, "x")
        out = story_dir / "out" / "nested"
        config = FormatterConfig(output_dir=out, sections=("test", "other"))

        written = FormattingPipeline(config, measurer).run(story)

        assert written == [out / "story.test", out / "story.other"]
        assert (out / "story.other").read_text(encoding="utf-8") == "\nx<p>\n\n"

    def test_crlf_newline_is_written_untouched(self, story_dir, measurer) -> None:
        story = write_story(story_dir, "")

        written = FormattingPipeline(FormatterConfig(newline="\r\n"), measurer).run(story)

        assert written[0].read_bytes() == b"<font Verdana>\r\n</font>\r\n"

    def test_nothing_to_render(self, tmp_path, measurer) -> None:
        (tmp_path / DEFAULT_INI_NAME).write_text("[web]\nRender=false\n", encoding="utf-8")
        story = write_story(tmp_path, "x")

        assert FormattingPipeline(FormatterConfig(), measurer).run(story) == []
        assert measurer.opened == 0

    def test_invalid_input_writes_nothing(self, tmp_path, measurer) -> None:
        story = write_story(tmp_path, "x")

        with pytest.raises(StoryValidationError):
            FormattingPipeline(FormatterConfig(), measurer).run(story)

        assert sorted(p.name for p in tmp_path.iterdir()) == ["story.txt"]


class TestTemplateIni:

    def test_template_renders_bbcode_only(self) -> None:
        ini = IniReader.from_string(load_template_ini())

        flags = dict(FormattingPipeline.section_flags(ini))

        assert flags["bbcode"] is True
        assert flags["html"] is False

    def test_write_template_keeps_existing_file(self, tmp_path) -> None:
        target = tmp_path / DEFAULT_INI_NAME
        write_template_ini(target)

        assert target.read_text(encoding="utf-8") == load_template_ini()
        with pytest.raises(FileExistsError):
            write_template_ini(target)
        write_template_ini(target, overwrite=True)

    def test_write_template_from_temporary_extract(self, tmp_path, monkeypatch) -> None:
        """Zipped installs only expose the template while as_file() is open."""
        extract = tmp_path / "extract.ini"

        @contextmanager
        def as_file(resource):
            extract.write_bytes(resource.read_bytes())
            try:
                yield extract
            finally:
                extract.unlink()

        monkeypatch.setattr(loader.res, "as_file", as_file)
        target = tmp_path / DEFAULT_INI_NAME

        write_template_ini(target)

        assert target.read_text(encoding="utf-8") == load_template_ini()
        assert not extract.exists()
