"""CLI entry point.

Wires the dependency helpers and the Checkstyle reporting into one
``buildtools`` command with a subcommand per task.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from . import checkstyle
from .artifact_spec import parse_artifact_spec, read_dependency_list
from .conflicts import check_dependencies
from .deptree import print_tree
from .errors import BuildToolsError
from .pom_parser import parse_pom, pom_artifacts
from .pom_writer import DEFAULT_REPOSITORY, pom_path, write_pom
from .settings import DEFAULT_SETTINGS_FILE, load_settings, section


def load_entries(path: Path, scopes: Optional[list] = None, include_optional: bool = True) -> list:
    """Read dependency entries from a pom.xml or a dependency list file."""
    if path.suffix == ".xml":
        return pom_artifacts(parse_pom(path), scopes, include_optional)
    return read_dependency_list(path)


def project_configs(project_dirs: list) -> list:
    """Per-project configs, each read from the project's own ``build.toml``."""
    configs = []
    for project_dir in project_dirs:
        project_settings = load_settings(project_dir / DEFAULT_SETTINGS_FILE)
        configs.append(checkstyle.CheckstyleConfig.from_settings(
            section(project_settings, "checkstyle"), project_dir,
        ))
    return configs


def checkstyle_config(settings: dict, project_dirs: list) -> checkstyle.CheckstyleConfig:
    """Config for the checkstyle subcommand.

    With no project directories the ``[checkstyle]`` table of the main
    settings applies to the current directory. With project directories
    each project is configured from its own ``build.toml`` and the results
    are combined, the main settings providing report locations and limits.
    """
    base = checkstyle.CheckstyleConfig.from_settings(section(settings, "checkstyle"))
    if not project_dirs:
        return base
    return checkstyle.aggregate(project_configs(project_dirs), base)


def _checkdeps(args, settings):
    check_dependencies(load_entries(args.file, args.scope, not args.skip_optional))
    return 0


def _deptree(args, settings):
    print_tree(load_entries(args.file, args.scope, not args.skip_optional))
    return 0


def _pom(args, settings):
    repository = args.repository or Path(
        section(settings, "dependencies").get("repository", DEFAULT_REPOSITORY)
    ).expanduser()
    for spec in args.specs:
        artifact = parse_artifact_spec(spec)
        path = pom_path(artifact, repository)
        if write_pom(artifact, repository):
            print(f"  ✓ {path}")
        else:
            print(f"  ⏭ {path} (already exists)")
    return 0


def _checkstyle(args, settings):
    if args.task == "clean":
        # Combined and per-project reports; no rules file needed.
        base = checkstyle.CheckstyleConfig.from_settings(section(settings, "checkstyle"))
        for config in [base] + project_configs(args.project):
            checkstyle.clean(config)
        return 0
    config = checkstyle_config(settings, args.project)
    if args.task == "check":
        result = checkstyle.create_xml(config)
        checkstyle.fail_on_violation(config, result)
        print(f"Checkstyle: {result.errors} errors, {result.warnings} warnings")
        return 0
    result = checkstyle.create_xml(config)
    if args.task == "html":
        checkstyle.create_html(config, result)
    return 0


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="buildtools",
        description="Dependency inspection helpers and Checkstyle reports",
    )
    parser.add_argument(
        "--settings", "-s", type=Path, default=DEFAULT_SETTINGS_FILE,
        help="Build settings file (default: build.toml)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("checkdeps", help="Report ids provided by more than one artifact")
    check.add_argument("file", type=Path, help="Dependency list or pom.xml")
    check.add_argument("--scope", action="append", help="Only pom.xml dependencies in this scope (repeatable)")
    check.add_argument("--skip-optional", action="store_true", help="Leave out pom.xml dependencies marked optional")
    check.set_defaults(handler=_checkdeps)

    tree = sub.add_parser("deptree", help="Print the dependency list as a tree")
    tree.add_argument("file", type=Path, help="Dependency list or pom.xml")
    tree.add_argument("--scope", action="append", help="Only pom.xml dependencies in this scope (repeatable)")
    tree.add_argument("--skip-optional", action="store_true", help="Leave out pom.xml dependencies marked optional")
    tree.set_defaults(handler=_deptree)

    pom = sub.add_parser("pom", help="Write minimal POMs into a local repository")
    pom.add_argument("specs", nargs="+", help="Artifact specs (group:id[:type[:classifier]]:version)")
    pom.add_argument("--repository", "-r", type=Path, default=None,
                     help="Local repository root (default: ~/.m2/repository)")
    pom.set_defaults(handler=_pom)

    cs = sub.add_parser("checkstyle", help="Checkstyle reports")
    cs.add_argument("task", choices=["xml", "html", "check", "clean"],
                    help="'xml'/'html' create reports, 'check' fails on too many violations, 'clean' removes reports")
    cs.add_argument("--project", "-p", type=Path, action="append", default=[],
                    help="Project directory to include (repeatable)")
    cs.set_defaults(handler=_checkstyle)

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = parse_args(argv)
    try:
        settings = load_settings(args.settings)
        return args.handler(args, settings)
    except (BuildToolsError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
