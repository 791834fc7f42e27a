"""Intra-module identifier occurrence counting.

A purely lexical count: every identifier-like token is counted by its text,
declaration sites included, without any scope resolution.
"""
from collections import Counter

from .parser import Module, node_text, walk

IDENTIFIER_NODE_TYPES = {
    'identifier',
    'type_identifier',
    'property_identifier',
    'shorthand_property_identifier',
    'shorthand_property_identifier_pattern',
    'statement_identifier',
}


def count_identifiers(module: Module) -> Counter:
    """Map identifier text to its number of occurrences in the module."""
    return Counter(
        node_text(node) for node in walk(module.root)
        if node.type in IDENTIFIER_NODE_TYPES
    )
