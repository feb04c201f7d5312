"""Shared fixtures."""

import textwrap
from pathlib import Path

import pytest


SAMPLES_DIR = Path(__file__).resolve().parent.parent / "samples"


@pytest.fixture
def samples_dir():
    """Directory holding the sample registration modules."""
    return SAMPLES_DIR


@pytest.fixture
def write_module(tmp_path):
    """Write a registration module into a temporary directory."""

    def _write(name, source):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source))
        return path

    return _write
