"""Dependency inspection helpers and Checkstyle reporting for Java builds."""

from .artifact_models import Artifact, ProviderGroup
from .artifact_spec import parse_artifact_spec, to_entries
from .conflicts import analyze, check_dependencies, format_report
from .deptree import format_tree, print_tree
from .errors import BuildToolsError, CheckstyleError, CheckstyleViolationError, InvalidInputError
from .pom_writer import generate_pom, write_pom

__all__ = [
    "Artifact", "ProviderGroup", "parse_artifact_spec", "to_entries",
    "analyze", "check_dependencies", "format_report", "format_tree", "print_tree",
    "BuildToolsError", "CheckstyleError", "CheckstyleViolationError", "InvalidInputError",
    "generate_pom", "write_pom",
]
