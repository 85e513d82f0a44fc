"""Maven POM parsing and property resolution.

Reads the coordinates, properties and direct dependencies of a pom.xml
and turns the dependencies into Artifacts for the conflict checker and
tree printer.
"""

import re
import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, Optional

from .artifact_models import Artifact
from .errors import InvalidInputError
from .pom_models import PomDependency, PomProject

# XML namespace used by Maven POM files (POM model version 4.0.0).
NS = {"m": "http://maven.apache.org/POM/4.0.0"}


def _find(el, tag, ns=NS):
    """Find a direct child element, with or without the Maven namespace."""
    result = el.find(f"m:{tag}", ns)
    if result is not None:
        return result
    return el.find(tag)


def _findall(el, tag, ns=NS):
    return list(el.findall(f"m:{tag}", ns)) + list(el.findall(tag))


def _text(el, tag, ns=NS):
    """Stripped text of a child element, or ``None`` if missing or empty."""
    child = _find(el, tag, ns)
    if child is not None and child.text and child.text.strip():
        return child.text.strip()
    return None


def _parse_dependency(dep_el) -> PomDependency:
    optional_text = _text(dep_el, "optional")
    return PomDependency(
        group_id=_text(dep_el, "groupId") or "",
        artifact_id=_text(dep_el, "artifactId") or "",
        version=_text(dep_el, "version"),
        scope=_text(dep_el, "scope") or "compile",
        classifier=_text(dep_el, "classifier"),
        dep_type=_text(dep_el, "type"),
        optional=bool(optional_text and optional_text.lower() == "true"),
    )


def parse_pom(pom_path: Path) -> PomProject:
    """Parse a ``pom.xml`` file into a PomProject.

    Handles both namespaced and non-namespaced POM files. groupId and
    version fall back to the ``<parent>`` coordinates when not declared.

    Args:
        pom_path: Filesystem path to the pom.xml file.

    Returns:
        The parsed project.

    Raises:
        InvalidInputError: If the file is not well-formed XML.
    """
    try:
        root = ET.parse(pom_path).getroot()
    except ET.ParseError as e:
        raise InvalidInputError(f"Cannot parse {pom_path}: {e}") from e

    parent_gid = parent_ver = None
    parent_el = _find(root, "parent")
    if parent_el is not None:
        parent_gid = _text(parent_el, "groupId")
        parent_ver = _text(parent_el, "version")

    properties = {}
    props_el = _find(root, "properties")
    if props_el is not None:
        for child in props_el:
            tag = child.tag.split("}")[-1] if "}" in child.tag else child.tag
            if child.text:
                properties[tag] = child.text.strip()

    dependencies = []
    deps_el = _find(root, "dependencies")
    if deps_el is not None:
        for dep_el in _findall(deps_el, "dependency"):
            dependencies.append(_parse_dependency(dep_el))

    return PomProject(
        group_id=_text(root, "groupId") or parent_gid or "",
        artifact_id=_text(root, "artifactId") or "",
        version=_text(root, "version") or parent_ver,
        packaging=_text(root, "packaging") or "jar",
        properties=properties,
        dependencies=dependencies,
    )


def resolve_property(value: str, properties: dict, _depth: int = 0) -> Optional[str]:
    """Resolve a ``${property}`` reference against a properties dict.

    Only values that are entirely a single ``${...}`` reference are
    resolved; concatenations like ``${a}-${b}`` are returned unchanged.
    Chains (``${foo}`` → ``${bar}`` → ``1.0``) are followed up to a depth of
    10. The ``project.`` prefix is also tried stripped.

    Args:
        value: String possibly holding a ``${property}`` reference.
        properties: Property dict to resolve against.
        _depth: Internal recursion counter (callers should not set this).

    Returns:
        The resolved value, or ``value`` itself if unresolvable.
    """
    if not value or _depth > 10:
        return value
    match = re.match(r"^\$\{(.+?)\}$", value)
    if match:
        prop_name = match.group(1)
        for key in [prop_name, prop_name.replace("project.", "")]:
            if key in properties:
                resolved = properties[key]
                if resolved and "${" in resolved:
                    return resolve_property(resolved, properties, _depth + 1)
                return resolved
    return value


def project_properties(project: PomProject) -> dict:
    """Declared properties plus ``project.groupId`` / ``project.version``."""
    properties = dict(project.properties)
    if project.group_id:
        properties.setdefault("project.groupId", project.group_id)
    if project.version:
        properties.setdefault("project.version", project.version)
    return properties


def pom_artifacts(
    project: PomProject,
    scopes: Optional[Iterable[str]] = None,
    include_optional: bool = True,
) -> list[Artifact]:
    """Convert a project's direct dependencies into Artifacts.

    Versions and groupIds are resolved against the project properties.
    Dependencies without a usable version (absent, or still a ``${...}``
    reference after resolution) are skipped with a warning on stderr, since
    they need a resolver to pin them.

    Args:
        project: Parsed POM.
        scopes: If given, only dependencies in these scopes are returned.
        include_optional: If ``False``, dependencies marked optional are
            left out.

    Returns:
        Artifacts in declaration order.
    """
    properties = project_properties(project)
    wanted = set(scopes) if scopes else None
    result = []
    for dep in project.dependencies:
        if wanted is not None and dep.scope not in wanted:
            continue
        if dep.optional and not include_optional:
            continue
        version = resolve_property(dep.version, properties)
        if not version or "${" in version:
            print(f"WARNING: {dep.group_id}:{dep.artifact_id} has no resolvable version, skipping",
                  file=sys.stderr)
            continue
        result.append(Artifact(
            group=resolve_property(dep.group_id, properties),
            id=dep.artifact_id,
            version=version,
            type=dep.dep_type or "jar",
            classifier=dep.classifier,
        ))
    return result
