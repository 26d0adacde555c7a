"""
The render session: turns story lines into tagged markup for one or more
configuration sections.
"""
import logging
from collections.abc import Sequence

from ..utils.config import GlobalDirectives, RenderConfig, SectionDirectives
from ..utils.config_accessor import ConfigAccessor
from ..utils.ini_reader import IniReader
from .font_metrics import FontMetrics, TextMeasurer
from .line_classifier import LineClassifier, LineKind
from .markup import MarkupAssembler
from .wrap_engine import WrapEngine


log = logging.getLogger("story_formatter")


class StoryRenderer:
    """
    Renders a story once per requested configuration section.

    Render options, global directives and font metrics are resolved once
    when the session is opened and reused for every section. The session
    must be used as a context manager so the measurer is released:

        with StoryRenderer(ini, PillowTextMeasurer()) as renderer:
            html = renderer.render(lines, "web")
    """

    def __init__(self, store: IniReader, measurer: TextMeasurer, newline: str = "\n"):
        self.accessor = ConfigAccessor(store)
        self.config = RenderConfig.from_accessor(self.accessor)
        self.directives = GlobalDirectives.from_accessor(self.accessor)
        self.metrics = FontMetrics(self.config, measurer)
        self.newline = newline
        self._open = False

    def __enter__(self):
        self.metrics.__enter__()
        self._open = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self._open = False
        self.metrics.__exit__(exc_type, exc, tb)


    def render(self, lines: Sequence[str], section: str) -> str:
        """Renders all `lines` with the markup directives of `section`."""
        if not self._open:
            raise RuntimeError("StoryRenderer.render() called outside of an open session.")

        section_directives = SectionDirectives.from_accessor(self.accessor, section)
        assembler = MarkupAssembler(section_directives, self.newline)

        classifier = LineClassifier(
            self.directives,
            paragraph_tags=(assembler.size_open(self.config.paragraph_size), assembler.size_close()),
            italic_tags=(section_directives.tag_italic_open, section_directives.tag_italic_close),
            lead_tab_markup=assembler.lead_tab(self.config.lead_tab_size),
            lead_tab_width=self.metrics.lead_tab_width,
        )
        wrap_engine = WrapEngine(self.metrics.measure_paragraph, self.metrics.wrap_after_width)

        fragments = []
        for index, original in enumerate(lines):
            line = classifier.classify(original)
            state = line.state

            match line.kind:
                case LineKind.IGNORED:
                    continue
                case LineKind.TERMINAL:
                    log.debug(f"[{section}] End prefix on line {index + 1}, skipping {len(lines) - index} lines.")
                    break
                case LineKind.EMPTY:
                    fragments.append(assembler.empty_line(state.open_tag, state.close_tag))
                    continue

            if self.config.wrapping_enabled:
                sub_lines = wrap_engine.wrap(state)
            else:
                sub_lines = [state.remaining_text]
            fragments.append(assembler.text_line(state.lead_markup, state.open_tag, state.close_tag, sub_lines))

        log.debug(f"[{section}] Rendered {len(fragments)} of {len(lines)} lines.")
        return assembler.compose(self.config.font_family, fragments)
