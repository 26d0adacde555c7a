"""Tests for markup assembly."""

import logging

import pytest

from storyformat.core.markup import MarkupAssembler, format_tag
from storyformat.utils.config import SectionDirectives


def make_assembler(newline="\n", **directives) -> MarkupAssembler:
    defaults = dict(
        lead_tab_val="&emsp;",
        tab_val="&nbsp;&nbsp;",
        non_breakable_space="&nbsp;",
        tag_font_open='<span style="font-family:{0}">',
        tag_font_close="</span>",
        tag_size_open='<span style="font-size:{0}%">',
        tag_size_close="</span>",
        tag_break="<br>",
        tag_italic_open="<i>",
        tag_italic_close="</i>",
    )
    defaults.update(directives)
    return MarkupAssembler(SectionDirectives(**defaults), newline)


class TestFormatTag:

    def test_fills_placeholder(self) -> None:
        assert format_tag("[size={0}]", 112) == "[size=112]"

    def test_template_without_placeholder(self) -> None:
        assert format_tag("<b>", 112) == "<b>"

    @pytest.mark.parametrize("template", ["<s {1}>", "<s {>", "<s {size}>", "<s {0.px}>", "<s {0[0]}>"])
    def test_bad_template_is_used_literally(self, caplog, template: str) -> None:
        with caplog.at_level(logging.WARNING, logger="story_formatter"):
            assert format_tag(template, 112) == template

        assert len(caplog.records) == 1


class TestMarkupAssembler:

    def test_break_includes_newline(self) -> None:
        assert make_assembler().tag_break == "<br>\n"
        assert make_assembler(newline="\r\n").tag_break == "<br>\r\n"

    def test_lead_tab_is_wrapped_in_its_size(self) -> None:
        assert make_assembler().lead_tab(165) == '<span style="font-size:165%">&emsp;</span>'

    def test_empty_line(self) -> None:
        assembler = make_assembler()

        assert assembler.empty_line("<p>", "</p>") == "<p>&nbsp;</p><br>\n"

    def test_text_line_breaks_every_sub_line(self) -> None:
        assembler = make_assembler()

        result = assembler.text_line("<t>", "<p>", "</p>", ["one", "two", "three"])

        assert result == "<t><p>one<br>\ntwo<br>\nthree</p><br>\n"

    def test_text_line_expands_tabs(self) -> None:
        assert make_assembler().text_line("", "", "", ["a\tb"]) == "a&nbsp;&nbsp;b<br>\n"

    def test_compose_without_header_and_footer(self) -> None:
        result = make_assembler(tag_font_open="[font={0}]", tag_font_close="[/font]").compose("Verdana", ["x"])

        assert result == "[font=Verdana]\nx[/font]\n"

    def test_compose_with_header_and_footer(self) -> None:
        assembler = make_assembler(header="<div>\n", footer="</div>")

        result = assembler.compose("Tahoma", [])

        assert result == '<div>\n<span style="font-family:Tahoma">\n</span>\n</div>'
