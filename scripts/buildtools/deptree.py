"""Plain-text rendering of a resolved dependency list."""

import sys
from typing import Sequence

from .artifact_models import DependencyEntry, group_members
from .artifact_spec import to_string


def format_tree(entries: Sequence[DependencyEntry]) -> list[str]:
    """Render entries as a two-level tree.

    A bare artifact is one ``" + id:version"`` line. A provider group prints
    its selected artifact the same way, followed by one indented
    ``"   + id:version"`` line per alternate.

    Raises:
        InvalidInputError: If an entry is malformed.
    """
    lines = []
    for entry in entries:
        selected, *alternates = group_members(entry)
        lines.append(" + " + to_string(selected))
        for alt in alternates:
            lines.append("   + " + to_string(alt))
    return lines


def print_tree(entries: Sequence[DependencyEntry], out=None):
    out = out or sys.stdout
    for line in format_tree(entries):
        print(line, file=out)
