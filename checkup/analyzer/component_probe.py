"""Class-based React component detection."""
from typing import Optional

from .diagnostics import Diagnostic, Level
from .parser import Module, node_text, walk

CLASS_COMPONENT_MESSAGE = (
    "Looks like this file contains a class-based React component. "
    "Consider using a function-based React component instead."
)

CLASS_TYPES = {'class_declaration', 'abstract_class_declaration', 'class'}


def has_react_class(module: Module) -> bool:
    """Whether the module declares at least one class with a `render` method."""
    for node in walk(module.root):
        if node.type not in CLASS_TYPES:
            continue
        body = node.child_by_field_name('body')
        if body is None:
            continue
        for member in body.named_children:
            if member.type != 'method_definition':
                continue
            name = member.child_by_field_name('name')
            if name is not None and node_text(name) == 'render':
                return True
    return False


def check_class_components(module: Module, display_path: str) -> Optional[Diagnostic]:
    if not has_react_class(module):
        return None
    return Diagnostic(level=Level.WARN, message=CLASS_COMPONENT_MESSAGE, file=display_path)
