"""Checkstyle XML/HTML reporting.

Runs Checkstyle over a project's Java sources and turns its XML output
into an HTML report and a pass/fail verdict. Checkstyle itself is a Java
tool; it is started through ``subprocess`` with a classpath the caller
provides (see :func:`checkstyle_dependencies` for the jars it needs).
The HTML report is rendered with a user-supplied XSLT stylesheet when one
is configured, and as a built-in summary table otherwise.

Which classes get checked can be narrowed with class name regexes::

    config = CheckstyleConfig(config_file=Path("etc/checkstyle.xml"))
    config.include("de.javakaffee.web.msm.*")
    config.exclude(r"\\.Const(ants)?$")
"""

import os
import re
import shutil
import subprocess
import sys
import xml.etree.ElementTree as ET
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from html import escape
from pathlib import Path
from typing import Optional, Sequence

from lxml import etree

from .artifact_models import Artifact
from .artifact_spec import parse_artifact_spec
from .errors import CheckstyleError, CheckstyleViolationError

VERSION = "5.0"
MAIN_CLASS = "com.puppycrawl.tools.checkstyle.Main"

DEFAULT_REPORT_DIR = "reports/checkstyle"
DEFAULT_DATA_FILE = "reports/checkstyle.data"
DEFAULT_SOURCE_DIR = "src/main/java"
HTML_REPORT_NAME = "checkstyle-report.html"


def checkstyle_dependencies(version: str = VERSION) -> list[Artifact]:
    """Artifacts that make up the Checkstyle runtime classpath."""
    specs = [
        f"checkstyle:checkstyle:jar:{version}",
        "antlr:antlr:jar:2.7.6",
        "com.google.collections:google-collections:jar:0.9",
        "commons-beanutils:commons-beanutils-core:jar:1.7.0",
        "commons-cli:commons-cli:jar:1.0",
        "commons-logging:commons-logging:jar:1.0.3",
    ]
    return [parse_artifact_spec(s) for s in specs]


def _compile_patterns(patterns) -> list:
    compiled = []
    for p in patterns:
        if isinstance(p, str):
            try:
                p = re.compile(p)
            except re.error as e:
                raise CheckstyleError(f"Invalid class pattern '{p}': {e}") from e
        compiled.append(p)
    return compiled


def _as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _as_bool(key: str, value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise CheckstyleError(f"Invalid value for '{key}': {value!r}, expected true or false")


def _as_int(key: str, value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise CheckstyleError(f"Invalid value for '{key}': {value!r}, expected a number") from e


@dataclass
class CheckstyleConfig:
    """Where Checkstyle reads sources from and writes reports to.

    Attributes:
        report_dir: Directory holding the HTML report.
        data_file: Checkstyle's XML output.
        config_file: Checkstyle rules file (required to run).
        style: XSLT stylesheet for the HTML report, or ``None`` for the
            built-in summary.
        fail_on_violation: Whether exceeding the limits fails the build.
        max_errors: Errors tolerated before failing.
        max_warnings: Warnings tolerated before failing.
        sources: Source directories to scan.
        includes: Compiled class name patterns to check.
        excludes: Compiled class name patterns to skip.
        classpath: Jars of the Checkstyle runtime.
        version: Checkstyle version the classpath is expected to hold.
    """
    report_dir: Path = Path(DEFAULT_REPORT_DIR)
    data_file: Path = Path(DEFAULT_DATA_FILE)
    config_file: Optional[Path] = None
    style: Optional[Path] = None
    fail_on_violation: bool = True
    max_errors: int = 0
    max_warnings: int = 0
    sources: list = field(default_factory=list)
    includes: list = field(default_factory=list)
    excludes: list = field(default_factory=list)
    classpath: list = field(default_factory=list)
    version: str = VERSION

    def include(self, *patterns) -> "CheckstyleConfig":
        """Add class name patterns to check. Strings are compiled as regexes."""
        self.includes.extend(_compile_patterns(patterns))
        return self

    def exclude(self, *patterns) -> "CheckstyleConfig":
        """Add class name patterns to skip. Strings are compiled as regexes."""
        self.excludes.extend(_compile_patterns(patterns))
        return self

    def report_to(self, name: Optional[str] = None) -> Path:
        path = Path(self.report_dir)
        if name:
            path = path / name
        return path.resolve()

    @property
    def html_out(self) -> Path:
        return self.report_to(HTML_REPORT_NAME)

    @classmethod
    def from_settings(cls, settings: dict, base_dir: Path = Path(".")) -> "CheckstyleConfig":
        """Build a config from a ``[checkstyle]`` settings table.

        Relative paths are taken relative to ``base_dir``. Sources default to
        ``src/main/java``.

        Args:
            settings: The ``[checkstyle]`` table (may be empty).
            base_dir: Project directory.

        Returns:
            A new CheckstyleConfig.

        Raises:
            CheckstyleError: If a value has the wrong type or a pattern does
                not compile.
        """
        base_dir = Path(base_dir)
        config_file = settings.get("config")
        style = settings.get("style")
        config = cls(
            report_dir=base_dir / settings.get("report-dir", DEFAULT_REPORT_DIR),
            data_file=base_dir / settings.get("data-file", DEFAULT_DATA_FILE),
            config_file=base_dir / config_file if config_file else None,
            style=base_dir / style if style else None,
            fail_on_violation=_as_bool("fail-on-violation", settings.get("fail-on-violation", True)),
            max_errors=_as_int("max-errors", settings.get("max-errors", 0)),
            max_warnings=_as_int("max-warnings", settings.get("max-warnings", 0)),
            sources=[base_dir / s for s in _as_list(settings.get("sources", DEFAULT_SOURCE_DIR))],
            classpath=[base_dir / c for c in _as_list(settings.get("classpath"))],
            version=str(settings.get("version", VERSION)),
        )
        config.include(*_as_list(settings.get("include")))
        config.exclude(*_as_list(settings.get("exclude")))
        return config


@dataclass
class Violation:
    """One ``<error>`` entry of a Checkstyle XML report."""
    file: str
    line: int
    column: Optional[int]
    severity: str
    message: str
    source: str = ""


@dataclass
class CheckstyleResult:
    """Parsed Checkstyle XML report.

    Attributes:
        files: Names of all checked files, in report order.
        violations: Every violation, in report order.
    """
    files: list = field(default_factory=list)
    violations: list = field(default_factory=list)

    @property
    def errors(self) -> int:
        return sum(1 for v in self.violations if v.severity == "error")

    @property
    def warnings(self) -> int:
        return sum(1 for v in self.violations if v.severity == "warning")

    def by_file(self) -> OrderedDict:
        grouped = OrderedDict()
        for v in self.violations:
            grouped.setdefault(v.file, []).append(v)
        return grouped


def class_name(src: Path, src_dir: Path) -> str:
    """Dotted class name of a Java source relative to its source root.

    ``src/main/java/de/foo/Bar.java`` under ``src/main/java`` is ``de.foo.Bar``.
    """
    return ".".join(Path(src).relative_to(src_dir).with_suffix("").parts)


def select_sources(config: CheckstyleConfig) -> list[Path]:
    """Java files to check.

    Without include or exclude patterns every ``.java`` file below each
    existing source directory is taken. Otherwise a file is taken when its
    class name matches an include pattern (any, if there are none) and no
    exclude pattern. Patterns match anywhere in the name (``re.search``).
    """
    includes, excludes = config.includes, config.excludes
    selected = []
    for src_dir in map(Path, config.sources):
        if not src_dir.is_dir():
            continue
        for src in sorted(src_dir.rglob("*.java")):
            if includes or excludes:
                name = class_name(src, src_dir)
                if includes and not any(p.search(name) for p in includes):
                    continue
                if any(p.search(name) for p in excludes):
                    continue
            selected.append(src)
    return selected


def build_command(config: CheckstyleConfig, files: Sequence[Path]) -> list[str]:
    """Command line running Checkstyle with XML output into the data file.

    Raises:
        CheckstyleError: If no config file or no classpath is set.
    """
    if not config.config_file:
        raise CheckstyleError("No checkstyle config file set")
    if not config.classpath:
        deps = ", ".join(a.id for a in checkstyle_dependencies(config.version))
        raise CheckstyleError(f"No checkstyle classpath set, it needs: {deps}")
    return [
        "java", "-cp", os.pathsep.join(str(c) for c in config.classpath),
        MAIN_CLASS,
        "-c", str(config.config_file),
        "-f", "xml",
        "-o", str(config.data_file),
    ] + [str(f) for f in files]


def parse_results(data_file: Path) -> CheckstyleResult:
    """Parse a Checkstyle XML report.

    Raises:
        CheckstyleError: If the file is missing or not well-formed XML.
    """
    try:
        root = ET.parse(data_file).getroot()
    except (ET.ParseError, OSError) as e:
        raise CheckstyleError(f"Cannot read checkstyle report {data_file}: {e}") from e
    result = CheckstyleResult()
    for file_el in root.findall("file"):
        name = file_el.get("name", "")
        result.files.append(name)
        for err in file_el.findall("error"):
            column = err.get("column")
            result.violations.append(Violation(
                file=name,
                line=int(err.get("line", "0")),
                column=int(column) if column else None,
                severity=err.get("severity", "error"),
                message=err.get("message", ""),
                source=err.get("source", ""),
            ))
    return result


def create_xml(config: CheckstyleConfig, runner=subprocess.run) -> CheckstyleResult:
    """Run Checkstyle and parse the XML report it writes.

    Args:
        config: What to check and where to write.
        runner: ``subprocess.run`` compatible callable.

    Returns:
        The parsed report.

    Raises:
        CheckstyleError: If Checkstyle cannot be started or writes no report.
    """
    data_file = Path(config.data_file)
    config.report_to().mkdir(parents=True, exist_ok=True)
    data_file.parent.mkdir(parents=True, exist_ok=True)
    # A report left over from an earlier run must not pass for this one.
    if data_file.exists():
        data_file.unlink()

    print(f"Creating checkstyle xml report {data_file}")
    files = select_sources(config)
    if not files:
        print("WARNING: No Java sources selected for checkstyle", file=sys.stderr)
        data_file.write_text(
            f'<?xml version="1.0" encoding="UTF-8"?>\n<checkstyle version="{escape(config.version)}">\n</checkstyle>\n',
            encoding="utf-8",
        )
        return CheckstyleResult()

    cmd = build_command(config, files)
    try:
        completed = runner(cmd, capture_output=True, text=True)
    except OSError as e:
        raise CheckstyleError(f"Cannot run checkstyle: {e}") from e
    if not data_file.exists():
        stderr = (completed.stderr or "").strip()
        raise CheckstyleError(
            f"Checkstyle wrote no report to {data_file} (exit status {completed.returncode}): {stderr}"
        )
    return parse_results(data_file)


def render_html(result: CheckstyleResult) -> str:
    """HTML summary of a Checkstyle result, one table per file with violations."""
    lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head><meta charset=\"utf-8\"><title>Checkstyle report</title></head>",
        "<body>",
        "<h1>Checkstyle report</h1>",
        f"<p>{len(result.files)} files checked, {result.errors} errors, {result.warnings} warnings.</p>",
    ]
    for name, violations in result.by_file().items():
        lines.append(f"<h2>{escape(name)}</h2>")
        lines.append("<table>")
        lines.append("<tr><th>Severity</th><th>Line</th><th>Column</th><th>Message</th><th>Check</th></tr>")
        for v in violations:
            column = "" if v.column is None else str(v.column)
            lines.append(
                f"<tr><td>{escape(v.severity)}</td><td>{v.line}</td><td>{column}</td>"
                f"<td>{escape(v.message)}</td><td>{escape(v.source)}</td></tr>"
            )
        lines.append("</table>")
    lines += ["</body>", "</html>", ""]
    return "\n".join(lines)


def transform_html(data_file: Path, style: Path) -> str:
    """Apply an XSLT stylesheet to a Checkstyle XML report.

    Raises:
        CheckstyleError: If either file cannot be read or parsed, or the
            stylesheet fails to compile or apply.
    """
    try:
        transform = etree.XSLT(etree.parse(str(style)))
        return str(transform(etree.parse(str(data_file))))
    except (etree.XMLSyntaxError, etree.XSLTError, OSError) as e:
        raise CheckstyleError(f"Cannot render {data_file} with style {style}: {e}") from e


def create_html(config: CheckstyleConfig, result: Optional[CheckstyleResult] = None) -> Path:
    """Write the HTML report.

    With a configured style the data file is run through that stylesheet.
    Otherwise the built-in summary is rendered from ``result``, parsing the
    data file when no result is given.
    """
    target = config.html_out
    print(f"Creating checkstyle html report '{target}'")
    if config.style:
        content = transform_html(Path(config.data_file), Path(config.style))
    else:
        if result is None:
            result = parse_results(config.data_file)
        content = render_html(result)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


def exceeds_limits(config: CheckstyleConfig, result: CheckstyleResult) -> bool:
    return result.errors > config.max_errors or result.warnings > config.max_warnings


def fail_on_violation(config: CheckstyleConfig, result: CheckstyleResult):
    """Raise if the result exceeds the limits and the config asks to fail.

    A lenient config only gets a warning on stderr.

    Raises:
        CheckstyleViolationError: When limits are exceeded and
            ``config.fail_on_violation`` is set.
    """
    if not exceeds_limits(config, result):
        return
    message = f"Too many checkstyle errors or warnings see reports in '{config.report_to()}'"
    if config.fail_on_violation:
        raise CheckstyleViolationError(message)
    print(f"WARNING: {message}", file=sys.stderr)


def clean(config: CheckstyleConfig):
    """Remove the report directory and the data file."""
    report_dir = config.report_to()
    if report_dir.exists():
        shutil.rmtree(report_dir)
    Path(config.data_file).unlink(missing_ok=True)


def _distinct_paths(values) -> list:
    distinct = []
    for v in values:
        if v and str(v).strip() and v not in distinct:
            distinct.append(v)
    return distinct


def aggregate(configs: Sequence[CheckstyleConfig], base: Optional[CheckstyleConfig] = None) -> CheckstyleConfig:
    """Combine per-project configs into one config covering all of them.

    Sources are the union of all project sources. Report locations, limits
    and patterns come from ``base``. When ``base`` names no config file the
    projects must agree on exactly one. When ``base`` names no style the
    projects may name at most one; with none the built-in HTML summary is
    used. The classpath is taken from the first project that has one.

    Args:
        configs: Per-project configs.
        base: Config for the combined run (defaults to a fresh config).

    Returns:
        A new config; ``base`` is not modified.

    Raises:
        CheckstyleError: If no single config file can be chosen, or the
            projects name different styles.
    """
    base = base or CheckstyleConfig()
    sources = []
    for c in configs:
        for s in c.sources:
            if s not in sources:
                sources.append(s)

    config_file = base.config_file
    if not config_file:
        candidates = _distinct_paths(c.config_file for c in configs)
        if len(candidates) != 1:
            raise CheckstyleError(
                "Could not set checkstyle config from projects, existing configs: '"
                + ", ".join(str(c) for c in candidates) + "'"
            )
        config_file = candidates[0]
        print(f"Setting checkstyle config to '{config_file}'")

    style = base.style
    if not style:
        styles = _distinct_paths(c.style for c in configs)
        if len(styles) > 1:
            raise CheckstyleError(
                "Could not set html style from projects, existing styles: '"
                + ", ".join(str(s) for s in styles) + "'"
            )
        if styles:
            style = styles[0]
            print(f"Setting checkstyle html style to '{style}'")

    classpath = list(base.classpath)
    if not classpath:
        classpath = next((list(c.classpath) for c in configs if c.classpath), [])

    return replace(
        base,
        config_file=config_file,
        style=style,
        sources=sources,
        classpath=classpath,
        includes=list(base.includes),
        excludes=list(base.excludes),
    )
