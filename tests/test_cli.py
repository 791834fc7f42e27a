"""Tests for the checkup command line interface."""
import json

import pytest
from typer.testing import CliRunner

from checkup.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ('CHECKUP_REEXPORT_POLICY', 'CHECKUP_JOBS', 'CHECKUP_DEAD_LOCALS', 'CHECKUP_CLASS_COMPONENTS'):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project(make_project):
    return make_project({
        'a.ts': "export const used = 1;\nexport const unused = 2;\n",
        'b.ts': "import { used } from './a';\nconsole.log(used);\n",
    })


class TestCheckCommand:
    """`checkup check`"""

    def test_reports_unused_exports(self, project):
        result = runner.invoke(app, ['check', str(project)])

        assert result.exit_code == 0, result.output
        assert "a.ts" in result.output
        assert "`unused` (L2) seems unused, consider deleting" in result.output
        assert "0 error(s), 1 warning(s)" in result.output

    def test_clean_codebase(self, make_project):
        root = make_project({
            'a.ts': "export const used = 1;\n",
            'b.ts': "import { used } from './a';\nconsole.log(used);\n",
        })

        result = runner.invoke(app, ['check', str(root)])

        assert result.exit_code == 0, result.output
        assert "Your codebase is clean!" in result.output

    def test_json_output(self, project):
        result = runner.invoke(app, ['check', str(project), '--json'])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [{
            "level": "warn",
            "message": "`unused` (L2) seems unused, consider deleting",
            "file": "a.ts",
            "line": 2,
        }]

    def test_reexport_policy_option(self, make_project):
        root = make_project({
            'a.ts': "export const x = 1;\nexport const y = 2;\n",
            'index.ts': "export * from './a';\n",
            'app.ts': "import { x } from './index';\nconsole.log(x);\n",
        })

        direct = runner.invoke(app, ['check', str(root), '--json'])
        transitive = runner.invoke(app, ['check', str(root), '--json', '--reexport-policy', 'transitive'])

        assert json.loads(direct.output) == []
        assert [d['message'] for d in json.loads(transitive.output)] == [
            "`y` (L2) seems unused, consider deleting",
        ]

    def test_strict_fails_on_errors(self, make_project):
        root = make_project({
            'a.ts': "const unused = 1;\nexport const x = 2;\n",
            'b.ts': "import { x } from './a';\nconsole.log(x);\n",
        })

        lenient = runner.invoke(app, ['check', str(root)])
        strict = runner.invoke(app, ['check', str(root), '--strict'])
        disabled = runner.invoke(app, ['check', str(root), '--strict', '--no-dead-locals'])

        assert lenient.exit_code == 0
        assert strict.exit_code == 1
        assert "module contains unused symbols, please remove them" in strict.output
        assert disabled.exit_code == 0, disabled.output

    def test_no_project(self, tmp_path):
        result = runner.invoke(app, ['check', str(tmp_path)])

        assert result.exit_code == 0
        assert "General" in result.output
        assert "No tsconfig.json found." in result.output

    def test_missing_path(self, tmp_path):
        result = runner.invoke(app, ['check', str(tmp_path / 'missing')])

        assert result.exit_code == 1
        assert "does not exist" in result.output


class TestProjectsCommand:
    """`checkup projects`"""

    def test_lists_projects(self, project):
        result = runner.invoke(app, ['projects', str(project)])

        assert result.exit_code == 0, result.output
        assert "tsconfig.json" in result.output

    def test_no_projects(self, tmp_path):
        result = runner.invoke(app, ['projects', str(tmp_path)])

        assert result.exit_code == 0
        assert "No tsconfig.json or jsconfig.json found." in result.output
