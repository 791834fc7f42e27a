"""Module graph and UsedNameIndex aggregation using NetworkX.

This is the single synchronization point of an analysis run: the index can
only be built once every module of the project has been classified.
"""
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Mapping
import networkx as nx

from ..config import ReexportPolicy
from .contribution import ALL, EMPTY, Contribution, Finite, union
from .js_import_tracker import (
    FORWARD, FORWARDING_KINDS, NAMESPACE_FORWARD, STAR_FORWARD, ReferenceSite,
)

UsedNameIndex = Mapping[Path, Contribution]


class ModuleGraphBuilder:
    """Build the directed module graph of one project and aggregate usage."""

    def __init__(self, policy: ReexportPolicy = ReexportPolicy.DIRECT):
        """Initialize graph builder.

        Args:
            policy: How forwarding declarations count as usage
        """
        self.policy = policy

    def build_graph(self, modules: Iterable[Path], sites: Iterable[ReferenceSite]) -> nx.DiGraph:
        """Build the module graph.

        Creates directed graph where edge (A, B) means "module A references module B";
        each edge carries the list of ReferenceSites behind it.

        Args:
            modules: Every successfully loaded module of the project
            sites: ReferenceSites of those modules

        Returns:
            NetworkX DiGraph over module paths
        """
        graph = nx.DiGraph()
        graph.add_nodes_from(modules)

        for site in sites:
            if site.source not in graph or site.target not in graph:
                continue
            if graph.has_edge(site.source, site.target):
                graph[site.source][site.target]['sites'].append(site)
            else:
                graph.add_edge(site.source, site.target, sites=[site])

        return graph

    def used_name_index(self, graph: nx.DiGraph) -> UsedNameIndex:
        """Union every contribution per target module.

        Args:
            graph: Graph returned by build_graph

        Returns:
            Read-only mapping from module path to its used names (or ALL)
        """
        if self.policy == ReexportPolicy.TRANSITIVE:
            used = self._transitive_index(graph)
        else:
            used = {
                node: union(site.contribution for site in self._incoming_sites(graph, node))
                for node in graph.nodes
            }
        return MappingProxyType(used)

    def _incoming_sites(self, graph: nx.DiGraph, node: Path):
        for _, _, data in graph.in_edges(node, data=True):
            yield from data['sites']

    def _transitive_index(self, graph: nx.DiGraph) -> Dict[Path, Contribution]:
        """Forwarded names count only when the forwarding module's export is used.

        Iterates to a fixed point so chains of barrels propagate; contributions
        only ever grow, so this terminates.
        """
        used: Dict[Path, Contribution] = {
            node: union(site.contribution for site in self._incoming_sites(graph, node)
                        if site.kind not in FORWARDING_KINDS)
            for node in graph.nodes
        }
        forwarding = [
            site
            for _, _, data in graph.edges(data=True)
            for site in data['sites']
            if site.kind in FORWARDING_KINDS
        ]

        changed = True
        while changed:
            changed = False
            for site in forwarding:
                grown = used[site.target] | self._forwarded(site, used[site.source])
                if grown != used[site.target]:
                    used[site.target] = grown
                    changed = True

        return used

    def _forwarded(self, site: ReferenceSite, source_used: Contribution) -> Contribution:
        """What a forwarding site contributes given current usage of the forwarding module."""
        if site.kind == FORWARD:
            return Finite.of(imported for imported, exported in site.forwards
                             if exported in source_used)
        if site.kind == STAR_FORWARD:
            if source_used.is_all:
                return ALL
            # export * never forwards the default export
            return Finite(source_used.names - {'default'})
        if site.kind == NAMESPACE_FORWARD:
            exported = site.forwards[0][1] if site.forwards else '*'
            return ALL if exported in source_used else EMPTY
        return site.contribution
