"""Build settings file loading.

Settings are kept in a TOML file (``build.toml`` by default) with one
table per tool, e.g.::

    [checkstyle]
    config = "etc/checkstyle.xml"
    max-warnings = 10

    [dependencies]
    repository = "/opt/m2"
"""

import tomllib
from pathlib import Path

from .errors import InvalidInputError

DEFAULT_SETTINGS_FILE = Path("build.toml")


def load_settings(path: Path = DEFAULT_SETTINGS_FILE) -> dict:
    """Load the settings file.

    Args:
        path: Path of the TOML file.

    Returns:
        Parsed settings, or an empty dict when the file does not exist.

    Raises:
        InvalidInputError: If the file is not valid TOML.
    """
    path = Path(path)
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise InvalidInputError(f"Invalid settings file {path}: {e}") from e


def section(settings: dict, name: str) -> dict:
    """Return the ``[name]`` table, or ``{}`` if absent or not a table."""
    value = settings.get(name)
    return value if isinstance(value, dict) else {}
