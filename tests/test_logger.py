import logging

from storyformat.utils.logger import LOGGER_NAME, MAX_LOG_FILES, setup_main_logger


def test_console_only_logger(tmp_path) -> None:
    logger = setup_main_logger(logging.INFO, log_dir=None)

    assert [type(h) for h in logger.handlers] == [logging.StreamHandler]
    assert logger.handlers[0].level == logging.INFO
    assert not list(tmp_path.iterdir())


def test_repeated_setup_does_not_stack_handlers(tmp_path) -> None:
    setup_main_logger(log_dir=tmp_path)
    logger = setup_main_logger(log_dir=tmp_path)

    assert logger is logging.getLogger(LOGGER_NAME)
    assert len(logger.handlers) == 2


def test_old_log_files_are_rotated(tmp_path) -> None:
    for i in range(MAX_LOG_FILES + 5):
        (tmp_path / f"formatter_old_{i:02}.log").write_text("", encoding="utf-8")

    setup_main_logger(log_dir=tmp_path)

    assert len(list(tmp_path.glob("formatter_*.log"))) == MAX_LOG_FILES
