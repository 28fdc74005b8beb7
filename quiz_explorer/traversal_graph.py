from __future__ import annotations

"""Map of the quiz as observed while exploring: which answer led from which page to which."""

import logging
from typing import Any, Dict, List, Tuple

import networkx as nx

from .candidates import Candidate

logger = logging.getLogger(__name__)


class TraversalGraph:
    """Directed multigraph of pages connected by the answers that link them.

    Each distinct ``(source, answer, target)`` triple is stored once with a
    ``count`` of how often it was observed.
    """

    def __init__(self) -> None:
        self._g: nx.MultiDiGraph = nx.MultiDiGraph()

    # --- page helpers -----------------------------------------------------
    def add_page(self, page_id: str) -> None:
        if page_id not in self._g:
            self._g.add_node(page_id, visits=0)

    def mark_visit(self, page_id: str) -> None:
        self.add_page(page_id)
        self._g.nodes[page_id]["visits"] += 1

    # --- edge helpers -----------------------------------------------------
    def add_transition(self, src: str, candidate: Candidate, dst: str) -> None:
        self.add_page(src)
        self.add_page(dst)
        key = candidate.describe()
        if self._g.has_edge(src, dst, key=key):
            self._g.edges[src, dst, key]["count"] += 1
        else:
            self._g.add_edge(src, dst, key=key, kind=candidate.kind.value, count=1)

    def successors(self, page_id: str) -> List[Tuple[str, str]]:
        """(target page, answer label) pairs observed from ``page_id``."""
        if page_id not in self._g:
            return []
        return [(dst, key) for _, dst, key in self._g.out_edges(page_id, keys=True)]

    def pages(self) -> List[str]:
        return list(self._g.nodes)

    def transitions(self) -> int:
        return self._g.number_of_edges()

    def to_networkx(self) -> nx.MultiDiGraph:
        return self._g

    # --- export -----------------------------------------------------------
    def to_json(self) -> Dict[str, Any]:
        return {
            "pages": {pid: dict(data) for pid, data in self._g.nodes(data=True)},
            "transitions": [
                {"source": u, "target": v, "answer": k, "count": data["count"]}
                for u, v, k, data in self._g.edges(keys=True, data=True)
            ],
        }

    def write_graphml(self, path: str) -> None:
        nx.write_graphml(self._g, path)
        logger.debug("Wrote traversal graph with %d pages to %s", self._g.number_of_nodes(), path)
