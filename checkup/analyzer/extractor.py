"""Export symbol extraction from parsed modules."""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from tree_sitter import Node

from .parser import Module, line_of, node_text


@dataclass(frozen=True)
class ExportSymbol:
    """A named binding a module makes visible to other modules."""
    name: str
    module: Path
    line: Optional[int]  # None when no declaration could be found
    kind: str  # function, class, variable, interface, type, enum, namespace, default, ...

    @property
    def sort_key(self) -> Tuple[bool, int, str]:
        """Order by line with undiscoverable declarations last, then by name."""
        return (self.line is None, self.line or 0, self.name)


class ExportExtractor:
    """Extract the export symbol set of a module."""

    # Declaration node types and the symbol kind they produce
    DECLARATION_KINDS = {
        'function_declaration': 'function',
        'generator_function_declaration': 'function',
        'function_signature': 'function',
        'class_declaration': 'class',
        'abstract_class_declaration': 'class',
        'interface_declaration': 'interface',
        'type_alias_declaration': 'type',
        'enum_declaration': 'enum',
        'internal_module': 'namespace',
        'module': 'namespace',
        'lexical_declaration': 'variable',
        'variable_declaration': 'variable',
    }

    def extract_exports(self, module: Module) -> List[ExportSymbol]:
        """Collect every exported name with its declaration line.

        The line of a symbol is the minimum start line over all declarations
        contributing the name (overloads, merged declarations, and the local
        declaration behind an `export { x }` specifier).

        Args:
            module: Parsed module

        Returns:
            ExportSymbol list ordered by line, then name
        """
        contributions: Dict[str, List[Tuple[Optional[int], str]]] = {}
        local_declarations = self._local_declarations(module)

        def add(name: str, line: Optional[int], kind: str):
            contributions.setdefault(name, []).append((line, kind))

        for statement in module.declarations:
            if statement.type == 'export_statement':
                self._collect_export(statement, local_declarations, add)

        symbols = []
        for name, entries in contributions.items():
            lines = [line for line, _ in entries if line is not None]
            symbols.append(ExportSymbol(
                name=name,
                module=module.path,
                line=min(lines) if lines else None,
                kind=entries[0][1],
            ))

        return sorted(symbols, key=lambda s: s.sort_key)

    def _collect_export(self, statement: Node, local_declarations, add):
        """Record the names exported by one `export ...` statement."""
        tokens = {child.type for child in statement.children if not child.is_named}
        declaration = statement.child_by_field_name('declaration')
        source = statement.child_by_field_name('source')

        # export default ... / export = x
        if 'default' in tokens or '=' in tokens:
            add('default', line_of(statement), 'default')
            return

        if declaration is not None:
            for name, node, kind in self.declared_names(declaration):
                add(name, line_of(node), kind)
            return

        for child in statement.named_children:
            if child.type == 'export_clause':
                for specifier in child.named_children:
                    if specifier.type != 'export_specifier':
                        continue
                    name_node = specifier.child_by_field_name('name')
                    alias_node = specifier.child_by_field_name('alias')
                    if name_node is None:
                        continue
                    exported = export_name(alias_node or name_node)
                    local = export_name(name_node)
                    if source is None and local in local_declarations:
                        # export { x } of a local declaration: the declaration contributes too
                        for line, kind in local_declarations[local]:
                            add(exported, line, kind)
                    add(exported, line_of(specifier), 'specifier')
            elif child.type == 'namespace_export':
                # export * as ns from './x'
                for ns_child in child.named_children:
                    add(export_name(ns_child), line_of(child), 'namespace-reexport')

    def _local_declarations(self, module: Module) -> Dict[str, List[Tuple[int, str]]]:
        """Top-level declarations that are not themselves exported."""
        local: Dict[str, List[Tuple[int, str]]] = {}
        for statement in module.declarations:
            if statement.type == 'export_statement':
                continue
            for name, node, kind in self.declared_names(statement):
                local.setdefault(name, []).append((line_of(node), kind))
        return local

    def declared_names(self, declaration: Node) -> List[Tuple[str, Node, str]]:
        """Names bound by a declaration node.

        Args:
            declaration: A declaration statement node

        Returns:
            List of (name, declaring node, kind) tuples
        """
        node_type = declaration.type

        if node_type == 'ambient_declaration':
            names = []
            for child in declaration.named_children:
                names.extend(self.declared_names(child))
            return names

        if node_type == 'expression_statement':
            # Some grammar versions wrap `namespace N {}` in an expression statement
            inner = declaration.named_children[0] if declaration.named_child_count else None
            if inner is not None and inner.type == 'internal_module':
                return self.declared_names(inner)
            return []

        kind = self.DECLARATION_KINDS.get(node_type)
        if kind is None:
            return []

        if node_type in ('lexical_declaration', 'variable_declaration'):
            names = []
            for declarator in declaration.named_children:
                if declarator.type != 'variable_declarator':
                    continue
                pattern = declarator.child_by_field_name('name')
                if pattern is not None:
                    names.extend((name, declarator, kind) for name in binding_names(pattern))
            return names

        name_node = declaration.child_by_field_name('name')
        if name_node is None:
            return []
        if name_node.type == 'string':
            # declare module 'foo' {} - ambient module, not a binding
            return []
        if name_node.type == 'nested_identifier':
            # namespace A.B.C {} binds A
            return [(node_text(name_node).split('.')[0].strip(), declaration, kind)]
        return [(node_text(name_node), declaration, kind)]


def export_name(node: Node) -> str:
    """Name of an export/import specifier part (identifiers or string literals)."""
    text = node_text(node)
    if node.type == 'string':
        return text[1:-1]
    return text


def binding_names(pattern: Node) -> List[str]:
    """Identifiers bound by a declarator name (plain or destructuring pattern)."""
    node_type = pattern.type
    if node_type in ('identifier', 'shorthand_property_identifier_pattern'):
        return [node_text(pattern)]
    if node_type == 'pair_pattern':
        value = pattern.child_by_field_name('value')
        return binding_names(value) if value is not None else []
    if node_type in ('object_assignment_pattern', 'assignment_pattern'):
        left = pattern.child_by_field_name('left')
        return binding_names(left) if left is not None else []
    if node_type in ('object_pattern', 'array_pattern', 'rest_pattern'):
        names = []
        for child in pattern.named_children:
            names.extend(binding_names(child))
        return names
    return []
