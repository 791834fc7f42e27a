"""Export usage analysis pipeline.

Runs in three phases per project:
1. Load, extract exports, classify references, count identifiers (parallel)
2. Aggregate the UsedNameIndex over the module graph (sequential)
3. Diagnose each module from its own data and the frozen index (parallel)
"""
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import AnalysisContext
from .component_probe import check_class_components
from .contribution import EMPTY
from .dead_locals import DeadLocalProbe
from .diagnostics import Diagnostic, Level, ParseError, ProjectConfigError
from .extractor import ExportExtractor, ExportSymbol
from .graph_builder import ModuleGraphBuilder, UsedNameIndex
from .js_import_tracker import ReferenceClassifier, ReferenceSite
from .occurrences import count_identifiers
from .parser import Module, load_module
from .project import ProjectConfig, discover_projects
from .reachability import ReachabilityEngine
from .resolver import SymbolResolver

NO_PROJECT_MESSAGE = (
    "No tsconfig.json found. Maybe give TypeScript a try :) https://www.typescriptlang.org/"
)


@dataclass(frozen=True, eq=False)
class ModuleScan:
    """Phase 1 result for one module."""
    path: Path
    module: Optional[Module] = None
    exports: Tuple[ExportSymbol, ...] = ()
    sites: Tuple[ReferenceSite, ...] = ()
    occurrences: Counter = field(default_factory=Counter)
    error: Optional[ParseError] = None


class ExportUsageAnalyzer:
    """Find dead exports across every project below a directory."""

    def __init__(self, context: AnalysisContext):
        self.context = context
        self.extractor = ExportExtractor()
        self.reachability = ReachabilityEngine()
        self.dead_locals = DeadLocalProbe()

    def analyze(self, base_dir: Optional[Path] = None) -> List[Diagnostic]:
        """Analyze each discovered project root independently.

        Args:
            base_dir: Directory to search for projects. Defaults to the context's base_dir.

        Returns:
            Diagnostics ordered by project, module, then finding
        """
        config_paths = discover_projects(base_dir or self.context.base_dir)
        if not config_paths:
            return [Diagnostic(level=Level.INFO, message=NO_PROJECT_MESSAGE)]

        diagnostics = []
        for config_path in config_paths:
            diagnostics.extend(self.analyze_config(config_path))
        return diagnostics

    def analyze_config(self, config_path: Path) -> List[Diagnostic]:
        try:
            project = ProjectConfig.load(config_path)
        except ProjectConfigError as exc:
            return [Diagnostic(level=Level.ERROR, message=exc.reason,
                               file=self.context.display_path(exc.path))]
        return self.analyze_project(project)

    def analyze_project(self, project: ProjectConfig) -> List[Diagnostic]:
        """Run all three phases over one closed-world project."""
        resolver = SymbolResolver.for_project(project)
        classifier = ReferenceClassifier(resolver)

        with ThreadPoolExecutor(max_workers=self.context.jobs) as executor:
            # --- PHASE 1: per-module extraction ---
            scans = list(executor.map(partial(self.scan_module, classifier), project.modules))

            # --- PHASE 2: aggregation (needs every module's sites) ---
            index = self.build_index(scans)

            # --- PHASE 3: per-module diagnosis against the frozen index ---
            results = list(executor.map(partial(self.diagnose_module, index), scans))

        return [diagnostic for result in results for diagnostic in result]

    def scan_module(self, classifier: ReferenceClassifier, path: Path) -> ModuleScan:
        """Phase 1 for a single module. A parse failure is captured, not raised."""
        try:
            module = load_module(path)
        except ParseError as exc:
            return ModuleScan(path=Path(path), error=exc)

        return ModuleScan(
            path=module.path,
            module=module,
            exports=tuple(self.extractor.extract_exports(module)),
            sites=tuple(classifier.classify(module)),
            occurrences=count_identifiers(module),
        )

    def build_index(self, scans: List[ModuleScan]) -> UsedNameIndex:
        loaded = [scan for scan in scans if scan.module is not None]
        builder = ModuleGraphBuilder(self.context.reexport_policy)
        graph = builder.build_graph(
            (scan.path for scan in loaded),
            (site for scan in loaded for site in scan.sites),
        )
        return builder.used_name_index(graph)

    def diagnose_module(self, index: UsedNameIndex, scan: ModuleScan) -> List[Diagnostic]:
        """Phase 3 for a single module: reads only its own scan and index entry."""
        display_path = self.context.display_path(scan.path)

        if scan.error is not None:
            return [Diagnostic(
                level=Level.ERROR,
                message=f"Failed to parse module: {scan.error.reason}",
                file=display_path,
                line=scan.error.line,
            )]

        diagnostics = []
        if self.context.check_dead_locals:
            finding = self.dead_locals.check(scan.module, display_path)
            if finding is not None:
                diagnostics.append(finding)

        if self.context.check_class_components:
            finding = check_class_components(scan.module, display_path)
            if finding is not None:
                diagnostics.append(finding)

        diagnostics.extend(self.reachability.diagnose(
            list(scan.exports), index.get(scan.path, EMPTY), scan.occurrences, display_path,
        ))
        return diagnostics
