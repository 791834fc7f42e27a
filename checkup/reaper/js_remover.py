from typing import Iterator, List, Optional, Tuple
from tree_sitter import Node

from ..analyzer.occurrences import count_identifiers
from ..analyzer.parser import Module, node_text

Edit = Tuple[int, int, bytes]

MODULE_STATEMENT_TYPES = {"import_statement", "export_statement"}


def is_script(module: Module) -> bool:
    """A file without top-level import or export statements shares the global scope."""
    return not any(node.type in MODULE_STATEMENT_TYPES for node in module.declarations)


class UnusedLocalRemover:
    """
    Removes locally-unused identifiers (imports, declarations) from JS/TS modules
    using Tree-sitter for precise AST-based deletion.

    An identifier is unused when its text occurs exactly once in the module,
    i.e. only where it is bound. Exported declarations are never touched.
    """

    # Declarations removed as a whole statement
    declaration_types = {
        "function_declaration",
        "generator_function_declaration",
        "class_declaration",
        "abstract_class_declaration",
        "interface_declaration",
        "type_alias_declaration",
        "enum_declaration",
    }

    variable_types = {"lexical_declaration", "variable_declaration"}

    # Declarations here are part of a loop header, not standalone statements
    loop_types = {"for_statement", "for_in_statement"}

    def remove_unused(self, module: Module) -> Tuple[str, int]:
        """
        Strip every locally-unused identifier from a module.

        Args:
            module: Parsed module

        Returns:
            (modified_source_code, number_of_edits)
        """
        occurrences = count_identifiers(module)
        keep_react = module.has_jsx

        def unused(name: str) -> bool:
            if keep_react and name == "React":
                return False
            return occurrences.get(name, 0) <= 1

        edits: List[Edit] = []
        for node in self._candidates(module.root, is_script(module)):
            if node.type == "import_statement":
                edit = self._import_edit(node, unused, module.source)
            elif node.type in self.variable_types:
                edit = self._variable_edit(node, unused, module.source)
            else:
                name_node = node.child_by_field_name("name")
                edit = None
                if name_node is not None and unused(node_text(name_node)):
                    edit = self._removal(node, module.source)
            if edit is not None:
                edits.append(edit)

        if not edits:
            return module.text, 0

        # Drop edits nested inside a larger removal, then apply in DESCENDING order
        edits.sort(key=lambda e: (e[0], -e[1]))
        final_edits: List[Edit] = []
        last_end = -1
        for edit in edits:
            if edit[0] >= last_end:
                final_edits.append(edit)
                last_end = edit[1]

        modified_bytes = bytearray(module.source)
        for start, end, replacement in reversed(final_edits):
            modified_bytes[start:end] = replacement

        return modified_bytes.decode("utf8"), len(final_edits)

    def _candidates(self, root: Node, script: bool = False) -> Iterator[Node]:
        """Statements that may bind a removable local, skipping ambient contexts.

        In a script, top-level declarations are globals visible to other files;
        only declarations nested in functions or blocks are candidates.
        """
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "ambient_declaration":
                continue
            parent = node.parent
            exported = parent is not None and parent.type == "export_statement"
            global_scope = script and parent is not None and parent.type == "program"
            if not exported and not global_scope:
                if node.type == "import_statement":
                    yield node
                elif node.type in self.declaration_types:
                    yield node
                elif node.type in self.variable_types and (parent is None or parent.type not in self.loop_types):
                    yield node
            stack.extend(reversed(node.children))

    def _import_edit(self, node: Node, unused, source: bytes) -> Optional[Edit]:
        """Drop unused import bindings; the whole statement if none is left."""
        clause = next((c for c in node.named_children if c.type == "import_clause"), None)
        if clause is None:
            # Side-effect import: nothing bound
            return None

        kept: List[str] = []
        kept_specifiers: List[str] = []
        removed = 0
        for child in clause.named_children:
            if child.type == "identifier":
                if unused(node_text(child)):
                    removed += 1
                else:
                    kept.append(node_text(child))
            elif child.type == "namespace_import":
                binding = next((c for c in child.named_children if c.type == "identifier"), None)
                if binding is not None and unused(node_text(binding)):
                    removed += 1
                else:
                    kept.append(node_text(child))
            elif child.type == "named_imports":
                for specifier in child.named_children:
                    if specifier.type != "import_specifier":
                        continue
                    local = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
                    if local is not None and unused(node_text(local)):
                        removed += 1
                    else:
                        kept_specifiers.append(node_text(specifier))
            else:
                return None

        if removed == 0:
            return None
        if kept_specifiers:
            kept.append("{ " + ", ".join(kept_specifiers) + " }")
        if not kept:
            return self._removal(node, source)
        return (clause.start_byte, clause.end_byte, ", ".join(kept).encode("utf8"))

    def _variable_edit(self, node: Node, unused, source: bytes) -> Optional[Edit]:
        """Drop unused simple declarators; the whole statement if none is left."""
        declarators = [c for c in node.named_children if c.type == "variable_declarator"]
        if not declarators:
            return None

        kept = []
        for declarator in declarators:
            name_node = declarator.child_by_field_name("name")
            if name_node is not None and name_node.type == "identifier" and unused(node_text(name_node)):
                continue
            kept.append(declarator)

        if len(kept) == len(declarators):
            return None
        if not kept:
            return self._removal(node, source)
        replacement = ", ".join(node_text(d) for d in kept)
        return (declarators[0].start_byte, declarators[-1].end_byte, replacement.encode("utf8"))

    def _removal(self, node: Node, source: bytes) -> Edit:
        start, end = self._extend_range_for_newline(source, node.start_byte, node.end_byte)
        return (start, end, b"")

    def _extend_range_for_newline(self, source_bytes: bytes, start: int, end: int) -> Tuple[int, int]:
        """
        Adjusts the end index to consume a trailing newline if present,
        ensuring we don't leave empty lines behind.
        """
        length = len(source_bytes)
        current = end

        # Consume optional carriage return
        if current < length and source_bytes[current] == 13:  # \r
            current += 1

        # Consume newline
        if current < length and source_bytes[current] == 10:  # \n
            current += 1
            return (start, current)

        return (start, end)
