"""Rich console for report output on terminals without UTF-8 support."""
from rich.console import Console
from .logger import is_utf8_capable, sanitize_for_terminal


class SafeConsole(Console):
    """Console that swaps report markers (➜, ✓) for ASCII when the terminal can't encode them."""

    def __init__(self, *args, **kwargs):
        self._ascii_only = not is_utf8_capable()
        if self._ascii_only:
            kwargs.setdefault('legacy_windows', True)
        super().__init__(*args, **kwargs)

    def print(self, *objects, **kwargs) -> None:
        if self._ascii_only:
            objects = tuple(
                sanitize_for_terminal(obj, force=True) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)

    def status(self, *args, **kwargs):
        # The default dots spinner is Unicode
        if self._ascii_only:
            kwargs['spinner'] = 'line'
        return super().status(*args, **kwargs)
