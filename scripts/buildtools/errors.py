"""Exception types raised by the build tools.

Library code raises these; only the CLI catches ``BuildToolsError`` and
turns it into an ``ERROR:`` line and a non-zero exit status.
"""


class BuildToolsError(Exception):
    """Base class for all errors reported by the build tools."""


class InvalidInputError(BuildToolsError, ValueError):
    """Malformed input: a bad artifact spec, an empty provider group, a
    ``None`` entry, or a file that cannot be parsed."""


class CheckstyleError(BuildToolsError):
    """Checkstyle could not be configured or run."""


class CheckstyleViolationError(CheckstyleError):
    """Checkstyle found more errors or warnings than the configured limits."""
