"""Tests for the measured greedy word wrap."""

from storyformat.core.line_classifier import LineState
from storyformat.core.wrap_engine import WrapEngine


def state(text: str, leading_width: float = 0.0) -> LineState:
    return LineState(text, "<p>", "</p>", leading_width)


def length(text: str) -> float:
    return float(len(text))


class TestWrapEngine:

    def test_short_line_is_one_sub_line(self) -> None:
        assert WrapEngine(length, 92).wrap(state("A short line.")) == ["A short line."]

    def test_wraps_before_the_word_that_does_not_fit(self) -> None:
        assert WrapEngine(length, 10).wrap(state("alpha beta gamma")) == ["alpha beta", "gamma"]

    def test_exact_fit_is_accepted(self) -> None:
        assert WrapEngine(length, 10).wrap(state("alpha beta")) == ["alpha beta"]
        assert WrapEngine(length, 9).wrap(state("alpha beta")) == ["alpha", "beta"]

    def test_long_single_word_is_never_split(self) -> None:
        engine = WrapEngine(length, 5)

        assert engine.wrap(state("Supercalifragilistic")) == ["Supercalifragilistic"]
        assert engine.wrap(state("Supercalifragilistic is")) == ["Supercalifragilistic", "is"]

    def test_first_word_is_not_measured(self) -> None:
        measured = []

        def measure(text):
            measured.append(text)
            return 0.0

        WrapEngine(measure, 10).wrap(state("one two"))

        assert measured == ["one two"]

    def test_measurement_may_be_non_monotonic(self) -> None:
        widths = {"a b": 100.0}
        engine = WrapEngine(lambda text: widths.get(text, float(len(text))), 10)

        assert engine.wrap(state("a b c")) == ["a", "b c"]

    def test_leading_width_only_counts_for_first_sub_line(self) -> None:
        engine = WrapEngine(length, 10)

        # "one two" + 3 fits; "three four" fits only without the leading width
        assert engine.wrap(state("one two three four", leading_width=3)) == ["one two", "three four"]

    def test_trailing_whitespace_is_dropped(self) -> None:
        assert WrapEngine(length, 10).wrap(state("alpha beta   gamma  ")) == ["alpha beta", "gamma"]

    def test_leading_whitespace_of_the_line_is_kept(self) -> None:
        assert WrapEngine(length, 10).wrap(state("  a b")) == ["  a b"]

    def test_tabs_stay_in_the_sub_lines(self) -> None:
        assert WrapEngine(length, 10).wrap(state("a\tb")) == ["a\tb"]

    def test_empty_and_blank_text(self) -> None:
        engine = WrapEngine(length, 10)

        assert engine.wrap(state("")) == [""]
        assert engine.wrap(state("    ")) == [""]

    def test_zero_width_threshold_puts_every_word_on_its_own_line(self) -> None:
        assert WrapEngine(length, 0).wrap(state("a b c")) == ["a", "b", "c"]
