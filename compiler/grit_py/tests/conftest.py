#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import sys
from pathlib import Path
from textwrap import dedent

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from grit_ast import Program
from grit_backend import CodeGenerator
from grit_parser import Parser


@pytest.fixture
def repo_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def parse_source():
    """Parse Grit source text into a Program."""

    def _parse(src: str) -> Program:
        return Parser.from_source(src).parse()

    return _parse


@pytest.fixture
def generate_source():
    """Translate Grit source text to Rust source text."""

    def _generate(src: str) -> str:
        program = Parser.from_source(dedent(src).strip("\n")).parse()
        return CodeGenerator().generate_program(program)

    return _generate


@pytest.fixture
def write_grit_file(tmp_path: Path):
    def _write(name: str, content: str) -> Path:
        file_path = tmp_path / f"{name}.grit"
        file_path.write_text(dedent(content).lstrip("\n"))
        return file_path

    return _write
