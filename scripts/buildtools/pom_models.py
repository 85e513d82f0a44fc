"""Maven POM data model classes.

Pure data structures for the parts of a ``pom.xml`` the dependency tools
read. No behavior or imports from other buildtools modules.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PomDependency:
    """A Maven ``<dependency>`` element.

    Attributes:
        group_id: Maven groupId (e.g. ``org.slf4j``).
        artifact_id: Maven artifactId (e.g. ``slf4j-api``).
        version: Version as written, possibly a ``${...}`` reference, or
            ``None`` if managed elsewhere.
        scope: Maven scope, ``compile`` when absent.
        classifier: Optional classifier (e.g. ``tests``).
        dep_type: Optional packaging type (e.g. ``pom``).
        optional: Whether the dependency is marked ``<optional>true</optional>``.
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    scope: str = "compile"
    classifier: Optional[str] = None
    dep_type: Optional[str] = None
    optional: bool = False


@dataclass
class PomProject:
    """Parse result for a single ``pom.xml``.

    Attributes:
        group_id: groupId, inherited from ``<parent>`` if not declared.
        artifact_id: artifactId.
        version: Version, inherited from ``<parent>`` if not declared.
        packaging: Packaging type, ``jar`` when absent.
        properties: ``<properties>`` as a flat dict.
        dependencies: Direct ``<dependencies>``.
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    packaging: str = "jar"
    properties: dict = field(default_factory=dict)
    dependencies: list = field(default_factory=list)
