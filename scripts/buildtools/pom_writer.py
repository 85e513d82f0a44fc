"""Minimal POM generation for artifacts without one.

Jars installed by hand into a local repository often come without a POM,
which makes Maven-style resolvers warn or fail. These helpers write the
smallest valid POM next to such an artifact.
"""

from pathlib import Path
from xml.sax.saxutils import escape

from .artifact_models import Artifact

DEFAULT_REPOSITORY = Path.home() / ".m2" / "repository"


def generate_pom(artifact: Artifact) -> str:
    """Build the content of a minimal ``.pom`` file for ``artifact``.

    Args:
        artifact: The artifact to describe.

    Returns:
        POM XML with modelVersion, groupId, artifactId and version.
    """
    return (
        "<project>\n"
        "  <modelVersion>4.0.0</modelVersion>\n"
        f"  <groupId>{escape(artifact.group)}</groupId>\n"
        f"  <artifactId>{escape(artifact.id)}</artifactId>\n"
        f"  <version>{escape(artifact.version)}</version>\n"
        "</project>\n"
    )


def pom_path(artifact: Artifact, repository: Path = DEFAULT_REPOSITORY) -> Path:
    """Location of the artifact's POM in a Maven-layout repository.

    ``org.slf4j:slf4j-api:1.5.6`` maps to
    ``<repository>/org/slf4j/slf4j-api/1.5.6/slf4j-api-1.5.6.pom``.
    """
    return (
        Path(repository).joinpath(*artifact.group.split("."))
        / artifact.id / artifact.version / f"{artifact.id}-{artifact.version}.pom"
    )


def write_pom(artifact: Artifact, repository: Path = DEFAULT_REPOSITORY) -> bool:
    """Write a minimal POM for ``artifact`` unless one already exists.

    Args:
        artifact: The artifact to describe.
        repository: Root of the local repository.

    Returns:
        ``True`` if the file was written, ``False`` if it already existed.
    """
    path = pom_path(artifact, repository)
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_pom(artifact), encoding="utf-8")
    return True
