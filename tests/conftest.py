"""Shared fixtures: throwaway projects and modules written under tmp_path."""
import json
import textwrap
from pathlib import Path

import pytest

from checkup.analyzer.engine import ExportUsageAnalyzer
from checkup.analyzer.parser import load_module
from checkup.config import AnalysisContext


def write_files(root: Path, files: dict):
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip(), encoding='utf-8')


@pytest.fixture
def make_project(tmp_path):
    """Create a project directory with a config file and source modules.

    `config` may be a dict (serialized as JSON), a raw string, or False for
    no config file at all.
    """
    def _make(files: dict, config=None, config_name='tsconfig.json', subdir=None):
        root = (tmp_path / subdir) if subdir else tmp_path
        root.mkdir(parents=True, exist_ok=True)
        if config is None:
            config = {}
        if config is not False:
            text = config if isinstance(config, str) else json.dumps(config)
            (root / config_name).write_text(text, encoding='utf-8')
        write_files(root, files)
        return root.resolve()
    return _make


@pytest.fixture
def parse_module(tmp_path):
    """Write a single source file and load it as a Module."""
    def _parse(source: str, name='module.ts'):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source).lstrip(), encoding='utf-8')
        return load_module(path)
    return _parse


@pytest.fixture
def analyze():
    """Run the analyzer below a directory with the given context settings."""
    def _analyze(base_dir: Path, **settings):
        settings.setdefault('check_dead_locals', False)
        context = AnalysisContext(base_dir=Path(base_dir).resolve(), **settings)
        return ExportUsageAnalyzer(context).analyze()
    return _analyze

