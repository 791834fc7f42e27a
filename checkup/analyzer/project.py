"""Project discovery from tsconfig.json / jsconfig.json files.

Every project-description file defines one closed world: the set of modules
whose imports are considered when judging an export used.
"""
import json
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple

from ..utils import jsonc
from .diagnostics import ProjectConfigError

CONFIG_FILENAMES = ('tsconfig.json', 'jsconfig.json')

TS_EXTENSIONS = ('.ts', '.tsx', '.mts', '.cts')
JS_EXTENSIONS = ('.js', '.jsx', '.mjs', '.cjs')

# Never descend into vendored, generated, or VCS directories
EXCLUDED_DIRS = {
    'node_modules', 'bower_components', 'jspm_packages',
    '.git', '.hg', '.svn',
    'vendor', 'third_party',
    '.next', '.nuxt', '.turbo', '.cache', 'coverage',
}

DEFAULT_EXCLUDES = ('node_modules', 'bower_components', 'jspm_packages')


@dataclass(frozen=True, eq=False)
class ProjectConfig:
    """A parsed project-description file and its module set."""
    config_path: Path
    modules: Tuple[Path, ...]
    base_url: Optional[Path] = None
    paths: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    paths_base: Optional[Path] = None
    allow_js: bool = False

    @property
    def root(self) -> Path:
        return self.config_path.parent

    @property
    def module_set(self) -> FrozenSet[Path]:
        return frozenset(self.modules)

    @classmethod
    def load(cls, config_path: str | Path) -> 'ProjectConfig':
        """Parse a project-description file (following `extends`) and collect modules.

        Args:
            config_path: Path to tsconfig.json or jsconfig.json

        Returns:
            ProjectConfig instance

        Raises:
            ProjectConfigError: If the file (or a file it extends) is unreadable or not valid JSON
        """
        config_path = Path(config_path).resolve()
        merged = _read_config(config_path, frozenset())
        options = merged.get('compilerOptions', {})

        allow_js = bool(options.get('allowJs')) or config_path.name == 'jsconfig.json'
        extensions = TS_EXTENSIONS + JS_EXTENSIONS if allow_js else TS_EXTENSIONS

        base_url = options.get('baseUrl')
        paths = options.get('paths') or {}
        return cls(
            config_path=config_path,
            modules=_collect_modules(config_path.parent, merged, extensions),
            base_url=base_url,
            paths={alias: tuple(targets) for alias, targets in paths.items()
                   if isinstance(targets, list)},
            paths_base=options.get('pathsBase') or base_url or config_path.parent,
            allow_js=allow_js,
        )


def discover_projects(base_dir: str | Path) -> List[Path]:
    """Find all project-description files below a directory.

    When a directory holds both tsconfig.json and jsconfig.json, only
    tsconfig.json is used.

    Args:
        base_dir: Directory to search

    Returns:
        Sorted list of config file paths
    """
    base_dir = Path(base_dir).resolve()
    found: Dict[Path, Path] = {}

    for filename in CONFIG_FILENAMES:
        for config_path in base_dir.rglob(filename):
            relative_parts = config_path.relative_to(base_dir).parts[:-1]
            if any(part in EXCLUDED_DIRS for part in relative_parts):
                continue
            # tsconfig.json is searched first and wins
            found.setdefault(config_path.parent, config_path)

    return sorted(found.values())


def _read_config(config_path: Path, seen: FrozenSet[Path]) -> dict:
    """Read one config file and merge it over the configs it extends.

    Paths inside the result are absolute, resolved against the config that
    declared them.
    """
    if config_path in seen:
        raise ProjectConfigError(config_path, "circular 'extends' chain")

    try:
        text = config_path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError):
        raise ProjectConfigError(config_path, "cannot read file") from None

    try:
        data = jsonc.loads(text)
    except json.JSONDecodeError:
        raise ProjectConfigError(config_path, "Not valid JSON") from None
    if not isinstance(data, dict):
        raise ProjectConfigError(config_path, "Not valid JSON")

    merged: dict = {'compilerOptions': {}}
    extends = data.get('extends')
    parents = [extends] if isinstance(extends, str) else (extends or [])
    for parent in parents:
        # Shared configs from packages live outside the project; only follow relative paths
        if not isinstance(parent, str) or not parent.startswith('.'):
            continue
        parent_path = (config_path.parent / parent).resolve()
        if parent_path.suffix != '.json' and not parent_path.exists():
            parent_path = parent_path.with_name(parent_path.name + '.json')
        inherited = _read_config(parent_path, seen | {config_path})
        merged['compilerOptions'].update(inherited.pop('compilerOptions', {}))
        merged.update(inherited)

    directory = config_path.parent
    options = _checked_options(config_path, data)
    own_options = {}
    for key in ('allowJs', 'outDir', 'baseUrl', 'paths'):
        if key in options:
            own_options[key] = options[key]
    if 'outDir' in own_options:
        own_options['outDir'] = (directory / own_options['outDir']).resolve()
    if 'baseUrl' in own_options:
        own_options['baseUrl'] = (directory / own_options['baseUrl']).resolve()
    if 'paths' in own_options:
        # paths targets are relative to baseUrl if set, else to the declaring config
        own_options['pathsBase'] = own_options.get(
            'baseUrl', merged['compilerOptions'].get('baseUrl', directory))
    merged['compilerOptions'].update(own_options)

    if isinstance(data.get('files'), list):
        merged['files'] = [(directory / f).resolve() for f in data['files'] if isinstance(f, str)]
    for key in ('include', 'exclude'):
        if isinstance(data.get(key), list):
            merged[key] = [(directory, p) for p in data[key] if isinstance(p, str)]

    return merged


def _checked_options(config_path: Path, data: dict) -> dict:
    """compilerOptions of one config, rejecting values of the wrong JSON type.

    Raises:
        ProjectConfigError: If an option used for module resolution has the wrong shape
    """
    options = data.get('compilerOptions')
    if options is None:
        return {}
    if not isinstance(options, dict):
        raise ProjectConfigError(config_path, "'compilerOptions' must be an object")

    for key in ('outDir', 'baseUrl'):
        if key in options and not isinstance(options[key], str):
            raise ProjectConfigError(config_path, f"'compilerOptions.{key}' must be a string")

    paths = options.get('paths')
    if paths is not None:
        if not isinstance(paths, dict):
            raise ProjectConfigError(config_path, "'compilerOptions.paths' must be an object")
        for alias, targets in paths.items():
            if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
                raise ProjectConfigError(
                    config_path, f"'compilerOptions.paths' entry '{alias}' must be a list of strings")
    return options


def _collect_modules(root: Path, merged: dict, extensions: Tuple[str, ...]) -> Tuple[Path, ...]:
    """Apply files/include/exclude to build the project's module set."""
    files = merged.get('files')
    include = merged.get('include')
    exclude = merged.get('exclude')
    out_dir = merged.get('compilerOptions', {}).get('outDir')

    if include is None:
        include = [] if files is not None else [(root, '**/*')]
    if exclude is None:
        exclude = [(root, pattern) for pattern in DEFAULT_EXCLUDES]
        if out_dir is not None:
            exclude.append((out_dir, '.'))

    selected = set()
    for path in files or []:
        if path.is_file() and path.name.endswith(extensions):
            selected.add(path)

    for directory, pattern in include:
        for path in _expand(directory, pattern):
            if not path.name.endswith(extensions) or not path.is_file():
                continue
            path = path.resolve()
            if _is_excluded(path, root, exclude):
                continue
            selected.add(path)

    return tuple(sorted(selected))


def _anchored(directory: Path, pattern: str) -> Tuple[Path, str]:
    """Split an absolute pattern into its anchor and a relative pattern."""
    pattern = pattern.strip()
    if Path(pattern).is_absolute():
        anchor = Path(Path(pattern).anchor)
        return anchor, pattern[len(Path(pattern).anchor):]
    if pattern.startswith('./'):
        pattern = pattern[2:]
    return directory, pattern


def _expand(directory: Path, pattern: str) -> Iterator[Path]:
    """Expand one include pattern; plain directory names mean everything below them."""
    directory, pattern = _anchored(directory, pattern)
    if not pattern:
        return

    if not any(ch in pattern for ch in '*?['):
        target = directory / pattern
        if target.is_dir():
            pattern = pattern.rstrip('/') + '/**/*'
        else:
            if target.is_file():
                yield target
            return

    yield from directory.glob(pattern)


def _is_excluded(path: Path, root: Path, exclude: List[Tuple[Path, str]]) -> bool:
    try:
        parts = path.relative_to(root).parts[:-1]
    except ValueError:
        parts = ()
    if any(part in EXCLUDED_DIRS for part in parts):
        return True

    for directory, pattern in exclude:
        directory, pattern = _anchored(directory, pattern)
        try:
            relative = path.relative_to(directory).as_posix()
        except ValueError:
            continue
        pattern = pattern.rstrip('/')
        if pattern in ('', '.'):
            # the directory itself (outDir)
            return True
        candidates = [pattern]
        if pattern.startswith('**/'):
            candidates.append(pattern[3:])
        for candidate in candidates:
            if fnmatch(relative, candidate) or fnmatch(relative, candidate + '/*'):
                return True
    return False
