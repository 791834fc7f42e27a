"""Dead-local-code probe: is a module minimal?"""
from typing import Optional

from ..reaper.js_remover import UnusedLocalRemover
from .diagnostics import Diagnostic, Level
from .parser import Module

UNUSED_SYMBOLS_MESSAGE = "module contains unused symbols, please remove them"


class DeadLocalProbe:
    """Strip unused locals and compare the result with the original text.

    Independent of export reachability: only the module itself is consulted.
    """

    def __init__(self, remover: Optional[UnusedLocalRemover] = None):
        self.remover = remover or UnusedLocalRemover()

    def check(self, module: Module, display_path: str) -> Optional[Diagnostic]:
        # Declaration files describe other code; their bindings are never "used" locally
        if module.is_declaration_file:
            return None

        stripped, _ = self.remover.remove_unused(module)
        if stripped == module.text:
            return None
        return Diagnostic(level=Level.ERROR, message=UNUSED_SYMBOLS_MESSAGE, file=display_path)
