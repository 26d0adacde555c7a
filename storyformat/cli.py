"""
Handles command-line argument parsing and initiates the formatting.
This is the entry point for the console script.
"""
import argparse
import logging
import sys
from pathlib import Path

from .core.pipeline import FormattingPipeline, StoryValidationError
from .resources.loader import write_template_ini
from .utils.config import FormatterConfig, DEFAULT_INI_NAME
from .utils.ini_reader import IniFormatError
from .utils.logger import setup_main_logger


# Get logger (will be configured in run_cli)
log = logging.getLogger("story_formatter")

EXIT_INVALID_INPUT = 2


def int_in_range(min_val, max_val):
    """Checks if value is an int in [min_val, max_val] range."""
    def checker(value):
        ivalue = int(value)
        if not (min_val <= ivalue <= max_val):
            raise argparse.ArgumentTypeError(f"Value must be between {min_val} and {max_val}, got {ivalue}")
        return ivalue
    return checker


def build_parser() -> argparse.ArgumentParser:
    defaults = FormatterConfig()
    parser = argparse.ArgumentParser(
        prog="storyformat",
        description="Formats a plain-text story into tagged markup with pixel-width word wrap.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("story", nargs="+",
                        help="Story text file. Several parts are joined with spaces, so paths with spaces need no quotes.")
    parser.add_argument("-i", "--ini", type=Path, default=None,
                        help=f"Configuration file. Defaults to {DEFAULT_INI_NAME} next to the story.")
    parser.add_argument("-p", "--search-parents", action="store_true",
                        help="Also look for the configuration file in parent folders.")
    parser.add_argument("-o", "--output-dir", type=Path, default=None,
                        help="Output folder. If omitted, output is placed next to the story.")
    parser.add_argument("-s", "--section", action="append", default=[],
                        help="Render this section even without Render=true. Can be repeated.")
    parser.add_argument("-f", "--font", type=Path, default=None,
                        help="TrueType font file used to measure text widths.")
    parser.add_argument("--max-size-kb", type=int_in_range(1, 100 * 1024), default=defaults.max_file_size_kb,
                        help="Largest accepted story size in KB.")
    parser.add_argument("--max-lines", type=int_in_range(1, 10_000_000), default=defaults.max_lines,
                        help="Largest accepted number of story lines.")
    parser.add_argument("--list-sections", action="store_true",
                        help="List the configuration sections and their Render flag, then exit.")
    parser.add_argument("--init", action="store_true",
                        help=f"Write a starter {DEFAULT_INI_NAME} next to the story and exit.")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Show more log output (-v info, -vv debug).")
    return parser


def _console_level(verbosity: int) -> int:
    return {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)


def run_cli(argv: list[str] | None = None) -> int:
    """
    The main function for the command-line interface.
    Parses arguments and runs the formatting pipeline.
    Returns the process exit code.
    """
    args = build_parser().parse_args(argv)

    console_level = _console_level(args.verbose)
    setup_main_logger(console_level)
    log.info(f"Console logger set to level: {logging.getLevelName(console_level)}")

    # Combine the whole argument list to a single path
    story_path = Path(" ".join(args.story))

    config = FormatterConfig(
        ini_path=args.ini,
        search_parent_dirs=args.search_parents,
        output_dir=args.output_dir,
        sections=tuple(args.section),
        font_path=args.font,
        max_file_size_kb=args.max_size_kb,
        max_lines=args.max_lines,
    )

    if args.init:
        target = args.ini or story_path.resolve().parent / config.ini_name
        try:
            write_template_ini(target)
        except FileExistsError as e:
            print(f"❌ {e}", file=sys.stderr)
            return EXIT_INVALID_INPUT
        print(f"✅ Wrote: {target}")
        return 0

    pipeline = FormattingPipeline(config)

    if args.list_sections:
        return _list_sections(pipeline, story_path)

    try:
        written = pipeline.run(story_path)
    except (StoryValidationError, IniFormatError) as e:
        print(f"❌ {e}", file=sys.stderr)
        log.error(f"Cannot format {story_path}: {e}", exc_info=False)
        return EXIT_INVALID_INPUT

    if not written:
        print("Nothing to render: no section has Render=true.")
    for path in written:
        print(f"✅ Done: {path}", flush=True)
    return 0


def _list_sections(pipeline: FormattingPipeline, story_path: Path) -> int:
    try:
        _, ini_path = pipeline.validate(story_path)
    except StoryValidationError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    ini = pipeline.load_ini(ini_path)
    for name, render in pipeline.section_flags(ini):
        print(f"{name:<20} {'render' if render else '-'}")
    return 0
