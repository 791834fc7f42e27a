"""Unused export diagnosis from the frozen UsedNameIndex."""
from typing import List, Mapping

from .contribution import Contribution
from .diagnostics import Diagnostic, Level
from .extractor import ExportSymbol


def format_symbol(symbol: ExportSymbol, used_in_module: bool) -> str:
    base = f"`{symbol.name}`"
    if symbol.line is not None:
        base += f" (L{symbol.line})"
    if used_in_module:
        return f"{base} seems to be only used in module, remove export statement"
    return f"{base} seems unused, consider deleting"


class ReachabilityEngine:
    """Report exports that no other module of the project uses."""

    def diagnose(self, exports: List[ExportSymbol], used: Contribution,
                 occurrences: Mapping[str, int], display_path: str) -> List[Diagnostic]:
        """Diagnose one module.

        Args:
            exports: The module's export symbols, in report order
            used: The module's UsedNameIndex entry
            occurrences: Identifier counts within the module
            display_path: Path shown in the diagnostics

        Returns:
            One WARN per unused export; nothing when `used` is ALL
        """
        if used.is_all:
            return []

        diagnostics = []
        for symbol in exports:
            if symbol.name in used:
                continue
            used_in_module = occurrences.get(symbol.name, 0) > 1
            diagnostics.append(Diagnostic(
                level=Level.WARN,
                message=format_symbol(symbol, used_in_module),
                file=display_path,
                line=symbol.line,
            ))
        return diagnostics
