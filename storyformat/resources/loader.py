import logging
import shutil
from pathlib import Path
from importlib import resources as res


log = logging.getLogger("story_formatter")


TEMPLATES_PACKAGE = "storyformat.resources.templates"
TEMPLATE_INI = "StoryFormatter.ini"


def _resource(package: str, filename: str):
    """Return a packaged resource, or None if it does not exist."""
    try:
        resource = res.files(package).joinpath(filename)
    except ModuleNotFoundError as e:
        log.error(f"Resource not found: {package}/{filename}: {e}")
        return None
    if not resource.is_file():
        log.error(f"Resource not found: {package}/{filename}")
        return None
    return resource


def load_text(package: str, filename: str) -> str | None:
    """Return file content as text."""
    resource = _resource(package, filename)
    if resource is None:
        return None
    return resource.read_text(encoding="utf-8")


def load_template_ini() -> str | None:
    return load_text(TEMPLATES_PACKAGE, TEMPLATE_INI)


def write_template_ini(target: Path, overwrite: bool = False) -> Path:
    """
    Copies the packaged starter configuration to `target`.
    An existing file is kept unless `overwrite` is set.
    """
    if target.exists() and not overwrite:
        raise FileExistsError(f"Configuration already exists: {target}")

    resource = _resource(TEMPLATES_PACKAGE, TEMPLATE_INI)
    if resource is None:
        raise FileNotFoundError(f"Packaged template {TEMPLATE_INI} is missing.")

    # The real path may be a temporary extract that only lives inside as_file()
    with res.as_file(resource) as source:
        shutil.copyfile(source, target)
    log.info(f"Wrote starter configuration to {target}")
    return target
