from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

from .project import ProjectConfig


class SymbolResolver:
    """
    Static module resolution engine.
    Resolves import strings to module paths of a single project, following the
    TypeScript rules for relative paths, `paths` aliases and `baseUrl`.
    """

    # Source extensions probed, in TypeScript resolution order
    EXTENSIONS = ['.ts', '.tsx', '.d.ts', '.mts', '.cts', '.js', '.jsx', '.mjs', '.cjs']

    # ESM-style imports name the emitted file: './a.js' may mean './a.ts'
    EMITTED_TO_SOURCE = {
        '.js': ['.ts', '.tsx'],
        '.jsx': ['.tsx'],
        '.mjs': ['.mts'],
        '.cjs': ['.cts'],
    }

    def __init__(self, modules: FrozenSet[Path], base_url: Optional[Path] = None,
                 paths: Optional[Dict[str, Tuple[str, ...]]] = None,
                 paths_base: Optional[Path] = None):
        """
        Args:
            modules: Resolved paths of every module in the project (the only valid targets)
            base_url: compilerOptions.baseUrl, absolute
            paths: compilerOptions.paths, e.g. {"@app/*": ["src/*"]}
            paths_base: Directory `paths` targets are relative to
        """
        self.modules = modules
        self.base_url = base_url
        self.paths_base = paths_base or base_url
        # Exact aliases are tried before wildcard ones, longest prefix first
        self.aliases: List[Tuple[str, str, Tuple[str, ...]]] = []
        for alias, targets in (paths or {}).items():
            if alias.count('*') > 1:
                continue
            prefix, _, suffix = alias.partition('*')
            self.aliases.append((prefix, suffix if '*' in alias else None, tuple(targets)))
        self.aliases.sort(key=lambda entry: (entry[1] is not None, -len(entry[0])))

    @classmethod
    def for_project(cls, project: ProjectConfig) -> 'SymbolResolver':
        return cls(project.module_set, project.base_url, project.paths, project.paths_base)

    def resolve(self, current_file: Path, import_string: str) -> Optional[Path]:
        """
        Determines the module an import string refers to.

        Args:
            current_file: The absolute path of the file containing the import.
            import_string: The string used in the import statement (e.g., './utils', '@app/x').

        Returns:
            The target module path, or None for external packages and unknown files
        """
        if not import_string:
            return None

        # 1. Relative Imports
        if import_string.startswith(('./', '../')) or import_string in ('.', '..'):
            return self._probe((current_file.parent / import_string).resolve())

        # 2. Path Aliases (tsconfig paths)
        if self.paths_base is not None:
            for prefix, suffix, targets in self.aliases:
                if suffix is None:
                    if import_string != prefix:
                        continue
                    captured = ''
                elif (import_string.startswith(prefix) and import_string.endswith(suffix)
                      and len(import_string) >= len(prefix) + len(suffix)):
                    captured = import_string[len(prefix):len(import_string) - len(suffix)]
                else:
                    continue

                for target in targets:
                    candidate = (self.paths_base / target.replace('*', captured)).resolve()
                    resolved = self._probe(candidate)
                    if resolved:
                        return resolved

        # 3. baseUrl-relative bare specifiers
        if self.base_url is not None and not import_string.startswith('/'):
            return self._probe((self.base_url / import_string).resolve())

        return None

    def _probe(self, path: Path) -> Optional[Path]:
        """
        Probes for a project module using JS resolution rules:
        1. Exact match
        2. Emitted extension swapped for the source extension
        3. Appended extensions
        4. Directory index files
        """
        if path in self.modules:
            return path

        for ext in self.EMITTED_TO_SOURCE.get(path.suffix.lower(), []):
            candidate = path.with_suffix(ext)
            if candidate in self.modules:
                return candidate

        for ext in self.EXTENSIONS:
            candidate = path.parent / (path.name + ext)
            if candidate in self.modules:
                return candidate

        for ext in self.EXTENSIONS:
            candidate = path / f"index{ext}"
            if candidate in self.modules:
                return candidate

        return None
