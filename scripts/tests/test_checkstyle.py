"""Tests for checkstyle.py — source selection, running, reports and limits."""

import re
import subprocess
import textwrap
from pathlib import Path

import pytest

from buildtools import checkstyle
from buildtools.checkstyle import (
    CheckstyleConfig,
    CheckstyleResult,
    Violation,
    aggregate,
    build_command,
    class_name,
    clean,
    create_html,
    create_xml,
    exceeds_limits,
    fail_on_violation,
    parse_results,
    render_html,
    select_sources,
)
from buildtools.errors import CheckstyleError, CheckstyleViolationError

REPORT = textwrap.dedent("""\
    <?xml version="1.0" encoding="UTF-8"?>
    <checkstyle version="5.0">
    <file name="src/main/java/de/msm/Foo.java">
    <error line="3" column="5" severity="error" message="Missing a Javadoc comment." source="com.puppycrawl.tools.checkstyle.checks.javadoc.JavadocMethodCheck"/>
    <error line="7" severity="warning" message="Line is longer than 80 &amp; more." source="LineLengthCheck"/>
    </file>
    <file name="src/main/java/de/msm/Bar.java">
    </file>
    </checkstyle>
""")


def fake_runner(report=REPORT, returncode=0, stderr=""):
    """Stand-in for subprocess.run that writes ``report`` to the ``-o`` file."""
    calls = []

    def run(cmd, **kwargs):
        calls.append(cmd)
        if report is not None:
            out = Path(cmd[cmd.index("-o") + 1])
            out.write_text(report, encoding="utf-8")
        return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr=stderr)

    run.calls = calls
    return run


@pytest.fixture
def config(tmp_path):
    return CheckstyleConfig(
        report_dir=tmp_path / "reports" / "checkstyle",
        data_file=tmp_path / "reports" / "checkstyle.data",
        config_file=tmp_path / "etc" / "checkstyle.xml",
        sources=[tmp_path / "src" / "main" / "java"],
        classpath=[Path("/jars/checkstyle-5.0.jar"), Path("/jars/antlr-2.7.6.jar")],
    )


def result_with(errors=0, warnings=0):
    violations = [Violation("A.java", 1, None, "error", "e") for _ in range(errors)]
    violations += [Violation("A.java", 1, None, "warning", "w") for _ in range(warnings)]
    return CheckstyleResult(files=["A.java"], violations=violations)


class TestCheckstyleDependencies:
    def test_default_version(self):
        deps = checkstyle.checkstyle_dependencies()
        assert deps[0].id == "checkstyle"
        assert deps[0].version == "5.0"
        assert len(deps) == 6

    def test_custom_version(self):
        assert checkstyle.checkstyle_dependencies("5.1")[0].version == "5.1"


class TestCheckstyleConfig:
    def test_defaults(self):
        config = CheckstyleConfig()
        assert config.fail_on_violation is True
        assert config.max_errors == 0
        assert config.max_warnings == 0
        assert config.report_to() == Path("reports/checkstyle").resolve()
        assert config.html_out.name == "checkstyle-report.html"

    def test_include_compiles_strings(self):
        config = CheckstyleConfig().include("some.package.*")
        assert config.includes[0].search("some.package.Foo")

    def test_include_keeps_compiled_patterns(self):
        pattern = re.compile(r"\.const(ants)?$", re.IGNORECASE)
        config = CheckstyleConfig().exclude(pattern)
        assert config.excludes == [pattern]

    def test_invalid_pattern(self):
        with pytest.raises(CheckstyleError, match="Invalid class pattern"):
            CheckstyleConfig().include("(")

    def test_from_settings_defaults(self, tmp_path):
        config = CheckstyleConfig.from_settings({}, tmp_path)
        assert config.sources == [tmp_path / "src/main/java"]
        assert config.data_file == tmp_path / "reports/checkstyle.data"
        assert config.config_file is None
        assert config.classpath == []

    def test_from_settings_values(self, tmp_path):
        config = CheckstyleConfig.from_settings({
            "config": "etc/checkstyle.xml",
            "fail-on-violation": "false",
            "max-errors": "2",
            "max-warnings": 10,
            "sources": ["core/src", "tomcat7/src"],
            "include": "de.javakaffee.*",
            "exclude": [r"\.Test"],
            "classpath": ["/jars/checkstyle.jar"],
            "version": "5.1",
        }, tmp_path)
        assert config.config_file == tmp_path / "etc/checkstyle.xml"
        assert config.fail_on_violation is False
        assert config.max_errors == 2
        assert config.max_warnings == 10
        assert config.sources == [tmp_path / "core/src", tmp_path / "tomcat7/src"]
        assert len(config.includes) == 1
        assert len(config.excludes) == 1
        assert config.classpath == [Path("/jars/checkstyle.jar")]
        assert config.version == "5.1"

    @pytest.mark.parametrize("settings", [
        {"max-errors": "many"},
        {"fail-on-violation": "sometimes"},
    ])
    def test_from_settings_bad_values(self, settings):
        with pytest.raises(CheckstyleError, match="Invalid value"):
            CheckstyleConfig.from_settings(settings)


class TestSelectSources:
    def test_class_name(self):
        assert class_name(Path("src/de/msm/Foo.java"), Path("src")) == "de.msm.Foo"

    def test_all_sources_without_patterns(self, config, java_project):
        java_project("de.msm.Foo", "de.msm.util.Bar")
        names = [p.name for p in select_sources(config)]
        assert sorted(names) == ["Bar.java", "Foo.java"]

    def test_include_and_exclude(self, config, java_project):
        java_project("de.msm.Foo", "de.msm.Constants", "de.msm.util.Simple", "org.other.Baz")
        config.include(r"de\.msm\.").exclude(r"\.Const(ants)?$", "util.Simple")
        assert [p.name for p in select_sources(config)] == ["Foo.java"]

    def test_exclude_only(self, config, java_project):
        java_project("de.msm.Foo", "de.msm.FooTest")
        config.exclude("Test$")
        assert [p.name for p in select_sources(config)] == ["Foo.java"]

    def test_missing_source_dir_skipped(self, config):
        assert select_sources(config) == []


class TestBuildCommand:
    def test_command(self, config):
        cmd = build_command(config, [Path("A.java")])
        assert cmd[:2] == ["java", "-cp"]
        assert "checkstyle-5.0.jar" in cmd[2]
        assert cmd[3] == checkstyle.MAIN_CLASS
        assert cmd[cmd.index("-c") + 1] == str(config.config_file)
        assert cmd[cmd.index("-f") + 1] == "xml"
        assert cmd[cmd.index("-o") + 1] == str(config.data_file)
        assert cmd[-1] == "A.java"

    def test_requires_config_file(self, config):
        config.config_file = None
        with pytest.raises(CheckstyleError, match="config file"):
            build_command(config, [])

    def test_requires_classpath(self, config):
        config.classpath = []
        with pytest.raises(CheckstyleError, match="classpath"):
            build_command(config, [])


class TestParseResults:
    def test_counts(self, tmp_path):
        path = tmp_path / "checkstyle.data"
        path.write_text(REPORT, encoding="utf-8")
        result = parse_results(path)
        assert result.files == ["src/main/java/de/msm/Foo.java", "src/main/java/de/msm/Bar.java"]
        assert result.errors == 1
        assert result.warnings == 1
        first, second = result.violations
        assert (first.line, first.column) == (3, 5)
        assert second.column is None
        assert second.message == "Line is longer than 80 & more."

    def test_missing_file(self, tmp_path):
        with pytest.raises(CheckstyleError, match="Cannot read"):
            parse_results(tmp_path / "missing.data")

    def test_bad_xml(self, tmp_path):
        path = tmp_path / "checkstyle.data"
        path.write_text("<checkstyle>", encoding="utf-8")
        with pytest.raises(CheckstyleError):
            parse_results(path)


class TestCreateXml:
    def test_runs_checkstyle(self, config, java_project):
        java_project("de.msm.Foo")
        runner = fake_runner()
        result = create_xml(config, runner=runner)
        assert len(runner.calls) == 1
        assert runner.calls[0][-1].endswith("Foo.java")
        assert result.errors == 1
        assert config.report_to().is_dir()

    def test_no_sources_writes_empty_report(self, config, capsys):
        runner = fake_runner()
        result = create_xml(config, runner=runner)
        assert runner.calls == []
        assert result.violations == []
        assert parse_results(config.data_file).files == []
        assert "WARNING: No Java sources" in capsys.readouterr().err

    def test_missing_report_is_an_error(self, config, java_project):
        java_project("de.msm.Foo")
        runner = fake_runner(report=None, returncode=255, stderr="Unable to find: checkstyle.xml")
        with pytest.raises(CheckstyleError, match="Unable to find"):
            create_xml(config, runner=runner)

    def test_stale_report_removed(self, config, java_project):
        java_project("de.msm.Foo")
        config.data_file.parent.mkdir(parents=True)
        config.data_file.write_text(REPORT, encoding="utf-8")
        with pytest.raises(CheckstyleError):
            create_xml(config, runner=fake_runner(report=None, returncode=1))

    def test_runner_oserror(self, config, java_project):
        java_project("de.msm.Foo")

        def broken(cmd, **kwargs):
            raise FileNotFoundError("java")

        with pytest.raises(CheckstyleError, match="Cannot run checkstyle"):
            create_xml(config, runner=broken)


class TestHtml:
    def test_render(self, tmp_path):
        path = tmp_path / "checkstyle.data"
        path.write_text(REPORT, encoding="utf-8")
        html = render_html(parse_results(path))
        assert "2 files checked, 1 errors, 1 warnings." in html
        assert "<h2>src/main/java/de/msm/Foo.java</h2>" in html
        assert "Bar.java</h2>" not in html
        assert "80 &amp; more." in html

    def test_create_html_from_data_file(self, config):
        config.data_file.parent.mkdir(parents=True)
        config.data_file.write_text(REPORT, encoding="utf-8")
        target = create_html(config)
        assert target == config.html_out
        assert "Checkstyle report" in target.read_text(encoding="utf-8")


class TestLimits:
    def test_within_limits(self, config):
        assert not exceeds_limits(config, result_with())
        fail_on_violation(config, result_with())

    def test_errors_exceed(self, config):
        assert exceeds_limits(config, result_with(errors=1))

    def test_warnings_within_configured_limit(self, config):
        config.max_warnings = 2
        assert not exceeds_limits(config, result_with(warnings=2))
        assert exceeds_limits(config, result_with(warnings=3))

    def test_fail_raises(self, config):
        with pytest.raises(CheckstyleViolationError, match="Too many checkstyle errors or warnings"):
            fail_on_violation(config, result_with(errors=1))

    def test_lenient_only_warns(self, config, capsys):
        config.fail_on_violation = False
        fail_on_violation(config, result_with(errors=1))
        assert "WARNING: Too many checkstyle" in capsys.readouterr().err


class TestClean:
    def test_removes_reports(self, config):
        config.report_to().mkdir(parents=True)
        config.html_out.write_text("x", encoding="utf-8")
        config.data_file.write_text("x", encoding="utf-8")
        clean(config)
        assert not config.report_to().exists()
        assert not config.data_file.exists()

    def test_nothing_to_clean(self, config):
        clean(config)


class TestAggregate:
    def test_merges_sources_and_config(self, tmp_path):
        core = CheckstyleConfig(config_file=Path("etc/cs.xml"), sources=[Path("core/src")],
                                classpath=[Path("/jars/cs.jar")])
        tc7 = CheckstyleConfig(config_file=Path("etc/cs.xml"), sources=[Path("tc7/src"), Path("core/src")])
        base = CheckstyleConfig(report_dir=tmp_path / "reports", max_warnings=5)
        combined = aggregate([core, tc7], base)
        assert combined.sources == [Path("core/src"), Path("tc7/src")]
        assert combined.config_file == Path("etc/cs.xml")
        assert combined.classpath == [Path("/jars/cs.jar")]
        assert combined.max_warnings == 5
        assert base.sources == []

    def test_base_config_file_wins(self):
        base = CheckstyleConfig(config_file=Path("global.xml"))
        combined = aggregate([CheckstyleConfig(config_file=Path("a.xml"))], base)
        assert combined.config_file == Path("global.xml")

    def test_conflicting_configs(self):
        configs = [CheckstyleConfig(config_file=Path("a.xml")), CheckstyleConfig(config_file=Path("b.xml"))]
        with pytest.raises(CheckstyleError, match="existing configs: 'a.xml, b.xml'"):
            aggregate(configs)

    def test_no_config(self):
        with pytest.raises(CheckstyleError, match="Could not set checkstyle config"):
            aggregate([CheckstyleConfig()])


STYLE = textwrap.dedent("""\
    <xsl:stylesheet version="1.0" xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
    <xsl:output method="html"/>
    <xsl:template match="/checkstyle">
    <html><body>
    <p>Files: <xsl:value-of select="count(file)"/></p>
    <ul><xsl:for-each select="file/error"><li><xsl:value-of select="@message"/></li></xsl:for-each></ul>
    </body></html>
    </xsl:template>
    </xsl:stylesheet>
""")


class TestStyledHtml:
    @pytest.fixture
    def styled(self, config, tmp_path):
        config.style = tmp_path / "etc" / "checkstyle-noframes.xsl"
        config.style.parent.mkdir(parents=True, exist_ok=True)
        config.style.write_text(STYLE, encoding="utf-8")
        config.data_file.parent.mkdir(parents=True, exist_ok=True)
        config.data_file.write_text(REPORT, encoding="utf-8")
        return config

    def test_style_from_settings(self, tmp_path):
        config = CheckstyleConfig.from_settings({"style": "etc/report.xsl"}, tmp_path)
        assert config.style == tmp_path / "etc/report.xsl"
        assert CheckstyleConfig.from_settings({}, tmp_path).style is None

    def test_transform(self, styled):
        html = checkstyle.transform_html(styled.data_file, styled.style)
        assert "Files: 2" in html
        assert "<li>Missing a Javadoc comment.</li>" in html
        assert "Checkstyle report" not in html

    def test_create_html_uses_style(self, styled):
        target = create_html(styled, result_with(errors=3))
        content = target.read_text(encoding="utf-8")
        assert "Files: 2" in content
        assert "3 errors" not in content

    def test_broken_stylesheet(self, styled):
        styled.style.write_text("<xsl:stylesheet", encoding="utf-8")
        with pytest.raises(CheckstyleError, match="Cannot render"):
            create_html(styled)

    def test_missing_stylesheet(self, styled, tmp_path):
        styled.style = tmp_path / "missing.xsl"
        with pytest.raises(CheckstyleError, match="Cannot render"):
            create_html(styled)


class TestAggregateStyle:
    def test_single_project_style_used(self):
        configs = [
            CheckstyleConfig(config_file=Path("cs.xml"), style=Path("etc/report.xsl")),
            CheckstyleConfig(config_file=Path("cs.xml")),
        ]
        assert aggregate(configs).style == Path("etc/report.xsl")

    def test_no_style_keeps_builtin_summary(self):
        assert aggregate([CheckstyleConfig(config_file=Path("cs.xml"))]).style is None

    def test_base_style_wins(self):
        base = CheckstyleConfig(style=Path("global.xsl"))
        configs = [
            CheckstyleConfig(config_file=Path("cs.xml"), style=Path("a.xsl")),
            CheckstyleConfig(config_file=Path("cs.xml"), style=Path("b.xsl")),
        ]
        assert aggregate(configs, base).style == Path("global.xsl")

    def test_conflicting_styles(self):
        configs = [
            CheckstyleConfig(config_file=Path("cs.xml"), style=Path("a.xsl")),
            CheckstyleConfig(config_file=Path("cs.xml"), style=Path("b.xsl")),
        ]
        with pytest.raises(CheckstyleError, match="Could not set html style from projects, existing styles: 'a.xsl, b.xsl'"):
            aggregate(configs)
