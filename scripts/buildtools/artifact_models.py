"""Artifact data model classes.

Pure data structures for resolved dependencies. No behavior beyond
simple accessors and no imports from other buildtools modules except the
error types.
"""

from dataclasses import dataclass
from typing import Optional, Union

from .errors import InvalidInputError


@dataclass(frozen=True)
class Artifact:
    """A resolved, versioned unit of packaged code.

    Instances are immutable and compare structurally, so the same
    coordinates reached through two different paths are equal.

    Attributes:
        group: Maven groupId (e.g. ``org.slf4j``).
        id: Maven artifactId (e.g. ``slf4j-api``).
        version: Version string (e.g. ``1.5.6``).
        type: Packaging type, ``jar`` unless stated otherwise.
        classifier: Optional classifier (e.g. ``sources``).
    """
    group: str
    id: str
    version: str
    type: str = "jar"
    classifier: Optional[str] = None

    @property
    def coordinates(self) -> tuple:
        """The ``(group, id, version)`` triple that identifies a provider."""
        return (self.group, self.id, self.version)


@dataclass(frozen=True)
class ProviderGroup:
    """Artifacts a resolver found to satisfy the same logical dependency.

    The first member is the artifact the resolver selected; the remaining
    members are alternates that transitively require the same identifier
    (e.g. several logging bindings).

    Attributes:
        members: Ordered tuple of Artifacts, selected first.
    """
    members: tuple = ()

    @property
    def selected(self) -> Artifact:
        if not self.members:
            raise InvalidInputError("Provider group is empty")
        return self.members[0]

    @property
    def alternates(self) -> tuple:
        return self.members[1:]


# A single entry of a resolved dependency list.
DependencyEntry = Union[Artifact, ProviderGroup]

# Conflicting identifier -> distinct providing artifacts, first-seen order.
ConflictReport = dict[str, list[Artifact]]


def group_members(entry) -> tuple:
    """Return the artifacts carried by a dependency entry.

    A bare Artifact yields a one-element tuple; a ProviderGroup yields its
    members, selected first.

    Args:
        entry: An ``Artifact`` or ``ProviderGroup``.

    Returns:
        Tuple of Artifacts.

    Raises:
        InvalidInputError: If the entry is ``None``, an empty group, a group
            holding something other than Artifacts, or of any other type.
    """
    if entry is None:
        raise InvalidInputError("Dependency entry is None")
    if isinstance(entry, Artifact):
        return (entry,)
    if isinstance(entry, ProviderGroup):
        if not entry.members:
            raise InvalidInputError("Provider group is empty")
        for member in entry.members:
            if not isinstance(member, Artifact):
                raise InvalidInputError(
                    f"Provider group member {member!r} is not an artifact"
                )
        return entry.members
    raise InvalidInputError(
        f"Unsupported dependency entry {entry!r}, expected an artifact or provider group"
    )
