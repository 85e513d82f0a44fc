"""Shared test fixtures for the buildtools test suite."""

import textwrap
from pathlib import Path

import pytest

from buildtools.artifact_models import Artifact, ProviderGroup


@pytest.fixture
def tmp_pom(tmp_path):
    """Factory fixture that writes a pom.xml to a temp directory and returns the path."""
    def _write(content: str) -> Path:
        pom = tmp_path / "pom.xml"
        pom.write_text(textwrap.dedent(content), encoding="utf-8")
        return pom
    return _write


@pytest.fixture
def tmp_deps(tmp_path):
    """Factory fixture that writes a dependency list file and returns the path."""
    def _write(content: str, name: str = "deps.txt") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def slf4j_api():
    return Artifact(group="org.slf4j", id="slf4j-api", version="1.5.6")


@pytest.fixture
def log4j_binding_group():
    """The slf4j log4j binding together with the log4j jar it pulls in."""
    return ProviderGroup((
        Artifact(group="org.slf4j", id="slf4j-log4j12", version="1.5.6"),
        Artifact(group="log4j", id="log4j", version="1.2.14"),
    ))


@pytest.fixture
def java_project(tmp_path):
    """Factory fixture creating ``.java`` files under ``src/main/java``.

    Takes dotted class names and returns the source root.
    """
    def _create(*class_names: str) -> Path:
        src_dir = tmp_path / "src" / "main" / "java"
        for name in class_names:
            path = src_dir.joinpath(*name.split(".")).with_suffix(".java")
            path.parent.mkdir(parents=True, exist_ok=True)
            simple = name.rsplit(".", 1)[-1]
            path.write_text(f"public class {simple} {{}}\n", encoding="utf-8")
        return src_dir
    return _create
