"""Reference classification: which exports of which module each construct uses."""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple
from tree_sitter import Node

from .contribution import ALL, EMPTY, Contribution, Finite
from .extractor import export_name
from .parser import Module, line_of, node_text, string_value, walk
from .resolver import SymbolResolver

# Site kinds
IMPORT = 'import'
FORWARD = 'forward'
STAR_FORWARD = 'star-forward'
NAMESPACE_FORWARD = 'namespace-forward'
DYNAMIC_IMPORT = 'dynamic-import'
REQUIRE = 'require'

FORWARDING_KINDS = {FORWARD, STAR_FORWARD, NAMESPACE_FORWARD}


@dataclass(frozen=True)
class ReferenceSite:
    """One import/export/call construct and what it proves used in its target."""
    source: Path
    target: Path
    contribution: Contribution
    line: int
    kind: str
    # (name in target, name exported by source) for forwarding declarations
    forwards: Tuple[Tuple[str, str], ...] = ()


def same_node(a: Optional[Node], b: Optional[Node]) -> bool:
    if a is None or b is None:
        return False
    return (a.start_byte, a.end_byte, a.type) == (b.start_byte, b.end_byte, b.type)


class WildcardUseTracker:
    """
    Given an `import * as ns from './x'` binding, figure out which exports of
    './x' the importing module uses through `ns`.

    If there is any use that cannot be attributed to a specific name, the whole
    import contributes ALL.
    """

    def __init__(self, module: Module):
        self.module = module

    def track(self, binding: Node) -> Contribution:
        alias = node_text(binding)
        used = set()

        for node in walk(self.module.root):
            if node.type not in ('identifier', 'shorthand_property_identifier'):
                continue
            if node_text(node) != alias or same_node(node, binding):
                continue

            members = self._classify_use(node)
            if members is None:
                # If we don't understand a use, be conservative.
                return ALL
            used.update(members)

        return Finite.of(used)

    def _classify_use(self, node: Node) -> Optional[List[str]]:
        """Names a single occurrence of the alias uses, or None if unknown."""
        if node.type == 'shorthand_property_identifier':
            # { ns } hands the whole namespace object around
            return None

        parent = node.parent
        if parent is None:
            return None

        # e.g. `ns.x`, `ns?.x`, `<ns.X />`
        if parent.type == 'member_expression':
            if same_node(parent.child_by_field_name('object'), node):
                prop = parent.child_by_field_name('property')
                if prop is not None and prop.type == 'property_identifier':
                    return [node_text(prop)]
            return None

        # e.g. `ns['x']`
        if parent.type == 'subscript_expression':
            index = parent.child_by_field_name('index')
            if same_node(parent.child_by_field_name('object'), node) and index is not None \
                    and index.type == 'string':
                return [string_value(index)]
            return None

        # e.g. `type T = ns.TypeName`
        if parent.type == 'nested_type_identifier':
            if same_node(parent.child_by_field_name('module'), node):
                name = parent.child_by_field_name('name')
                if name is not None:
                    return [node_text(name)]
            return None

        # e.g. `let v: typeof ns.value`, older JSX member names
        if parent.type == 'nested_identifier':
            children = parent.named_children
            if len(children) >= 2 and same_node(children[0], node):
                return [node_text(children[-1])]
            return None

        # e.g. `const { x, y: z } = ns`
        if parent.type == 'variable_declarator':
            if same_node(parent.child_by_field_name('value'), node):
                pattern = parent.child_by_field_name('name')
                if pattern is not None and pattern.type == 'object_pattern':
                    return self._destructured(pattern)
            return None

        return None

    def _destructured(self, pattern: Node) -> Optional[List[str]]:
        """Original property names taken out of the namespace by destructuring."""
        names = []
        for element in pattern.named_children:
            if element.type == 'comment':
                continue
            if element.type == 'shorthand_property_identifier_pattern':
                # const { x } = ns
                names.append(node_text(element))
            elif element.type == 'pair_pattern':
                # const { x: local } = ns  (also nested patterns: const { x: { a } } = ns)
                key = element.child_by_field_name('key')
                if key is not None and key.type == 'property_identifier':
                    names.append(node_text(key))
                elif key is not None and key.type == 'string':
                    names.append(string_value(key))
                else:
                    return None
            elif element.type == 'object_assignment_pattern':
                # const { x = 1 } = ns
                left = element.child_by_field_name('left')
                if left is None or left.type != 'shorthand_property_identifier_pattern':
                    return None
                names.append(node_text(left))
            else:
                # rest elements and anything else take an unknown subset
                return None
        return names


class ReferenceClassifier:
    """Derive ReferenceSites for every import/export/call construct of a module.

    Handles:
    - import ... from 'mod' (named, default, namespace, side effect)
    - export ... from 'mod' (named forwarding, export *, export * as ns)
    - import('mod') dynamic imports
    - require('mod') and `import x = require('mod')`
    """

    def __init__(self, resolver: SymbolResolver):
        self.resolver = resolver

    def classify(self, module: Module) -> List[ReferenceSite]:
        """
        Analyzes a module's tree and attributes each construct to its target module.
        Constructs whose target is not a module of the project produce no site.
        """
        sites: List[ReferenceSite] = []

        for node in walk(module.root):
            site = None
            if node.type == 'import_statement':
                site = self._classify_import(module, node)
            elif node.type == 'export_statement' and node.child_by_field_name('source') is not None:
                site = self._classify_forward(module, node)
            elif node.type == 'call_expression':
                site = self._classify_call(module, node)

            if site is not None:
                sites.append(site)

        return sites

    def _target(self, module: Module, specifier: Optional[Node]) -> Optional[Path]:
        if specifier is None:
            return None
        import_string = string_value(specifier)
        if import_string is None:
            return None
        target = self.resolver.resolve(module.path, import_string)
        if target is None or target == module.path:
            return None
        return target

    def _site(self, module: Module, node: Node, target: Path, contribution: Contribution,
              kind: str, forwards: Tuple[Tuple[str, str], ...] = ()) -> ReferenceSite:
        return ReferenceSite(
            source=module.path,
            target=target,
            contribution=contribution,
            line=line_of(node),
            kind=kind,
            forwards=forwards,
        )

    def _classify_import(self, module: Module, node: Node) -> Optional[ReferenceSite]:
        # TypeScript: import x = require('mod')
        for child in node.named_children:
            if child.type == 'import_require_clause':
                source = child.child_by_field_name('source')
                if source is None:
                    source = next((c for c in child.named_children if c.type == 'string'), None)
                target = self._target(module, source)
                return self._site(module, node, target, ALL, REQUIRE) if target else None

        target = self._target(module, node.child_by_field_name('source'))
        if target is None:
            return None

        clause = next((c for c in node.named_children if c.type == 'import_clause'), None)
        if clause is None:
            # import './side-effect' uses no names
            return self._site(module, node, target, EMPTY, IMPORT)

        names = set()
        contribution: Contribution = EMPTY
        for child in clause.named_children:
            if child.type == 'identifier':
                # import x from 'mod'
                names.add('default')
            elif child.type == 'named_imports':
                # import { x, y as z } from 'mod'
                for specifier in child.named_children:
                    if specifier.type != 'import_specifier':
                        continue
                    name_node = specifier.child_by_field_name('name')
                    if name_node is not None:
                        names.add(export_name(name_node))
            elif child.type == 'namespace_import':
                # import * as ns from 'mod'
                binding = next((c for c in child.named_children if c.type == 'identifier'), None)
                if binding is None:
                    return self._site(module, node, target, ALL, IMPORT)
                contribution = contribution | WildcardUseTracker(module).track(binding)
            elif child.type != 'comment':
                return self._site(module, node, target, ALL, IMPORT)

        return self._site(module, node, target, contribution | Finite.of(names), IMPORT)

    def _classify_forward(self, module: Module, node: Node) -> Optional[ReferenceSite]:
        target = self._target(module, node.child_by_field_name('source'))
        if target is None:
            return None

        for child in node.named_children:
            if child.type == 'export_clause':
                # export { x, y as z } from 'mod'
                forwards = []
                for specifier in child.named_children:
                    if specifier.type != 'export_specifier':
                        continue
                    name_node = specifier.child_by_field_name('name')
                    if name_node is None:
                        continue
                    alias_node = specifier.child_by_field_name('alias')
                    forwards.append((export_name(name_node), export_name(alias_node or name_node)))
                names = Finite.of(imported for imported, _ in forwards)
                return self._site(module, node, target, names, FORWARD, tuple(forwards))

            if child.type == 'namespace_export':
                # export * as ns from 'mod'
                exported = next((export_name(c) for c in child.named_children), '*')
                return self._site(module, node, target, ALL, NAMESPACE_FORWARD, (('*', exported),))

        # export * from 'mod'
        return self._site(module, node, target, ALL, STAR_FORWARD)

    def _classify_call(self, module: Module, node: Node) -> Optional[ReferenceSite]:
        function = node.child_by_field_name('function')
        arguments = node.child_by_field_name('arguments')
        if function is None or arguments is None or arguments.named_child_count == 0:
            return None

        if function.type == 'import':
            kind = DYNAMIC_IMPORT
        elif function.type == 'identifier' and node_text(function) == 'require':
            kind = REQUIRE
        else:
            return None

        # a dynamic import always imports everything, so we can't tell if only some are used
        target = self._target(module, arguments.named_children[0])
        return self._site(module, node, target, ALL, kind) if target else None
