"""Duplicate-provider detection over a resolved dependency list.

Finds logical dependency identifiers that are supplied by more than one
distinct artifact, either because the same id shows up with different
versions or groups, or because a resolver packaged alternates for it
into a provider group.
"""

import sys
from collections import OrderedDict
from typing import Sequence

from .artifact_models import Artifact, ConflictReport, DependencyEntry, group_members

NO_CONFLICTS_MESSAGE = (
    "Everything's fine, no transitive dependency is provided by more than one artifact."
)


def analyze(entries: Sequence[DependencyEntry]) -> ConflictReport:
    """Report which identifiers are provided by more than one artifact.

    Every artifact of every entry (the selected member of a provider group
    and all of its alternates alike) is recorded under its own id. Two
    artifacts are the same provider when their ``(group, id, version)``
    coordinates match, so an artifact reached through several groups is
    only counted once.

    All entries are validated before anything is reported, so a malformed
    entry never yields a partial report. The input is not modified.

    Args:
        entries: Bare Artifacts and ProviderGroups, in resolver order.

    Returns:
        Mapping of conflicting id to its distinct providers in first-seen
        order. Ids appear in the order they were first seen; an empty
        mapping means no conflicts.

    Raises:
        InvalidInputError: If an entry is ``None``, an empty provider group,
            or not an Artifact/ProviderGroup.
    """
    members = [group_members(entry) for entry in entries]

    # id → coordinates → first artifact seen with those coordinates
    providers = OrderedDict()
    for group in members:
        for artifact in group:
            seen = providers.setdefault(artifact.id, OrderedDict())
            seen.setdefault(artifact.coordinates, artifact)

    report = OrderedDict()
    for artifact_id, seen in providers.items():
        if len(seen) > 1:
            report[artifact_id] = list(seen.values())
    return report


def describe_provider(artifact: Artifact) -> str:
    """Render a provider as ``group:id:version``."""
    return ":".join(artifact.coordinates)


def format_report(report: ConflictReport) -> list[str]:
    """Turn a conflict report into printable lines.

    Args:
        report: Result of :func:`analyze`.

    Returns:
        One ``"<id> is provided by <a>, <b>"`` line per conflicting id, or a
        single informational line when there are no conflicts.
    """
    if not report:
        return [NO_CONFLICTS_MESSAGE]
    return [
        f"{artifact_id} is provided by " + ", ".join(describe_provider(p) for p in providers)
        for artifact_id, providers in report.items()
    ]


def check_dependencies(entries: Sequence[DependencyEntry], out=None) -> ConflictReport:
    """Analyze ``entries`` and print the formatted report.

    Args:
        entries: Bare Artifacts and ProviderGroups.
        out: Stream to print to (defaults to stdout).

    Returns:
        The conflict report, for callers that want to act on it.
    """
    out = out or sys.stdout
    report = analyze(entries)
    for line in format_report(report):
        print(line, file=out)
    return report
