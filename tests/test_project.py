"""Tests for project discovery, tsconfig parsing and module resolution."""
import json

import pytest

from checkup.analyzer.diagnostics import ProjectConfigError
from checkup.analyzer.project import ProjectConfig, discover_projects
from checkup.analyzer.resolver import SymbolResolver
from checkup.utils import jsonc


def module_names(project):
    return [p.relative_to(project.root).as_posix() for p in project.modules]


class TestJsonc:
    """Comment- and trailing-comma-tolerant JSON."""

    def test_comments_and_trailing_commas(self):
        text = """
        {
            // line comment
            "url": "http://example.com/*not a comment*/",
            /* block
               comment */
            "list": [1, 2,],
        }
        """
        assert jsonc.loads(text) == {"url": "http://example.com/*not a comment*/", "list": [1, 2]}

    def test_escaped_quotes_in_strings(self):
        assert jsonc.loads('{"a": "say \\"hi\\" // there"}') == {"a": 'say "hi" // there'}

    def test_invalid_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            jsonc.loads("{ nope }")


class TestDiscovery:
    """Finding tsconfig.json / jsconfig.json files."""

    def test_tsconfig_wins_over_jsconfig(self, make_project):
        root = make_project({'jsconfig.json': '{}'})
        assert discover_projects(root) == [root / 'tsconfig.json']

    def test_nested_projects_sorted(self, make_project):
        make_project({}, subdir='b')
        make_project({}, config_name='jsconfig.json', subdir='a')
        root = make_project({}, config=False)

        assert discover_projects(root) == [root / 'a' / 'jsconfig.json', root / 'b' / 'tsconfig.json']

    def test_node_modules_ignored(self, make_project):
        root = make_project({'node_modules/pkg/tsconfig.json': '{}'})
        assert discover_projects(root) == [root / 'tsconfig.json']


class TestProjectConfig:
    """Module sets computed from include/exclude/files and extends."""

    def test_default_module_set(self, make_project):
        root = make_project({
            'src/a.ts': '', 'src/b.tsx': '', 'src/c.js': '', 'README.md': '',
            'node_modules/pkg/index.ts': '',
        })
        project = ProjectConfig.load(root / 'tsconfig.json')

        assert module_names(project) == ['src/a.ts', 'src/b.tsx']
        assert not project.allow_js

    def test_allow_js(self, make_project):
        root = make_project({'a.ts': '', 'b.js': '', 'c.mjs': ''},
                            config={'compilerOptions': {'allowJs': True}})
        project = ProjectConfig.load(root / 'tsconfig.json')

        assert module_names(project) == ['a.ts', 'b.js', 'c.mjs']

    def test_jsconfig_implies_javascript(self, make_project):
        root = make_project({'a.js': ''}, config_name='jsconfig.json')
        project = ProjectConfig.load(root / 'jsconfig.json')

        assert project.allow_js
        assert module_names(project) == ['a.js']

    def test_include_and_exclude(self, make_project):
        root = make_project({
            'src/a.ts': '', 'src/generated/g.ts': '', 'scripts/s.ts': '',
        }, config={'include': ['src'], 'exclude': ['src/generated']})
        project = ProjectConfig.load(root / 'tsconfig.json')

        assert module_names(project) == ['src/a.ts']

    def test_glob_exclude(self, make_project):
        root = make_project({
            'src/a.ts': '', 'src/a.test.ts': '', 'src/deep/b.test.ts': '',
        }, config={'include': ['src/**/*'], 'exclude': ['**/*.test.ts']})
        project = ProjectConfig.load(root / 'tsconfig.json')

        assert module_names(project) == ['src/a.ts']

    def test_files_list(self, make_project):
        root = make_project({'a.ts': '', 'b.ts': ''}, config={'files': ['a.ts']})
        project = ProjectConfig.load(root / 'tsconfig.json')

        assert module_names(project) == ['a.ts']

    def test_out_dir_excluded(self, make_project):
        root = make_project({'src/a.ts': '', 'dist/a.d.ts': ''},
                            config={'compilerOptions': {'outDir': 'dist'}})
        project = ProjectConfig.load(root / 'tsconfig.json')

        assert module_names(project) == ['src/a.ts']

    def test_extends_inherits_compiler_options(self, make_project):
        root = make_project({
            'config/base.json': json.dumps({'compilerOptions': {'allowJs': True, 'baseUrl': '../src'}}),
            'src/a.js': '',
        }, config='{"extends": "./config/base.json", // shared settings\n}')
        project = ProjectConfig.load(root / 'tsconfig.json')

        assert project.allow_js
        assert project.base_url == root / 'src'
        assert module_names(project) == ['src/a.js']

    def test_circular_extends(self, make_project):
        root = make_project({'other.json': '{"extends": "./tsconfig.json"}'},
                            config={'extends': './other.json'})

        with pytest.raises(ProjectConfigError):
            ProjectConfig.load(root / 'tsconfig.json')

    @pytest.mark.parametrize('options, reason', [
        ({'paths': ['x']}, "'compilerOptions.paths' must be an object"),
        ({'paths': {'@app/*': 'src/*'}}, "'compilerOptions.paths' entry '@app/*' must be a list of strings"),
        ({'baseUrl': 5}, "'compilerOptions.baseUrl' must be a string"),
        ({'outDir': ['dist']}, "'compilerOptions.outDir' must be a string"),
    ])
    def test_wrongly_typed_options(self, make_project, options, reason):
        root = make_project({'a.ts': ''}, config={'compilerOptions': options})

        with pytest.raises(ProjectConfigError) as excinfo:
            ProjectConfig.load(root / 'tsconfig.json')
        assert excinfo.value.reason == reason

    def test_compiler_options_must_be_an_object(self, make_project):
        root = make_project({}, config={'compilerOptions': 'strict'})

        with pytest.raises(ProjectConfigError):
            ProjectConfig.load(root / 'tsconfig.json')

    def test_absolute_include_and_exclude(self, make_project):
        root = make_project({'src/a.ts': '', 'src/skip/b.ts': '', 'other/c.ts': ''})
        (root / 'tsconfig.json').write_text(json.dumps({
            'include': [(root / 'src').as_posix() + '/**/*'],
            'exclude': [(root / 'src' / 'skip').as_posix()],
        }))
        project = ProjectConfig.load(root / 'tsconfig.json')

        assert module_names(project) == ['src/a.ts']

    def test_invalid_json(self, make_project):
        root = make_project({}, config='{"compilerOptions": ')

        with pytest.raises(ProjectConfigError) as excinfo:
            ProjectConfig.load(root / 'tsconfig.json')
        assert excinfo.value.reason == "Not valid JSON"


class TestSymbolResolver:
    """Import specifier to project module resolution."""

    @pytest.fixture
    def root(self, tmp_path):
        return tmp_path.resolve()

    @pytest.fixture
    def resolver(self, root):
        modules = frozenset(root / p for p in (
            'src/app.ts', 'src/util.ts', 'src/view.tsx', 'src/lib/index.ts',
            'src/shared/api.ts', 'legacy/old.js',
        ))
        return SymbolResolver(
            modules,
            base_url=root / 'src',
            paths={'@shared/*': ('src/shared/*',), '@legacy': ('legacy/old.js',)},
            paths_base=root,
        )

    def test_relative_with_extension_probing(self, resolver, root):
        app = root / 'src/app.ts'
        assert resolver.resolve(app, './util') == root / 'src/util.ts'
        assert resolver.resolve(app, './view') == root / 'src/view.tsx'
        assert resolver.resolve(app, '../legacy/old') == root / 'legacy/old.js'

    def test_directory_index(self, resolver, root):
        assert resolver.resolve(root / 'src/app.ts', './lib') == root / 'src/lib/index.ts'

    def test_emitted_extension_maps_to_source(self, resolver, root):
        assert resolver.resolve(root / 'src/app.ts', './util.js') == root / 'src/util.ts'

    def test_paths_aliases(self, resolver, root):
        app = root / 'src/app.ts'
        assert resolver.resolve(app, '@shared/api') == root / 'src/shared/api.ts'
        assert resolver.resolve(app, '@legacy') == root / 'legacy/old.js'

    def test_base_url(self, resolver, root):
        assert resolver.resolve(root / 'src/app.ts', 'lib') == root / 'src/lib/index.ts'

    def test_unresolvable(self, resolver, root):
        app = root / 'src/app.ts'
        assert resolver.resolve(app, 'react') is None
        assert resolver.resolve(app, './missing') is None
        assert resolver.resolve(app, '') is None
