from __future__ import annotations

"""The root-to-frontier path of answers currently applied."""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from .candidates import Candidate


@dataclass(frozen=True)
class DecisionNode:
    page_id: str
    candidate: Candidate

    def to_json(self) -> Dict[str, Any]:
        return {"page_id": self.page_id, "candidate": self.candidate.to_json()}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "DecisionNode":
        return cls(page_id=data["page_id"], candidate=Candidate.from_json(data["candidate"]))


class DecisionStack:
    """Ordered decisions from the root page to the current frontier.

    Replaying the stack from the root reproduces the position the explorer
    was in, which is what resume relies on.
    """

    def __init__(self, nodes: List[DecisionNode] | None = None) -> None:
        self._nodes: List[DecisionNode] = list(nodes or [])

    def push(self, page_id: str, candidate: Candidate) -> DecisionNode:
        """Record ``candidate`` as applied on ``page_id``.

        Trying another answer on the page already on top replaces that node.
        """
        node = DecisionNode(page_id, candidate)
        if self._nodes and self._nodes[-1].page_id == page_id:
            self._nodes[-1] = node
        else:
            self._nodes.append(node)
        return node

    def pop(self) -> Optional[DecisionNode]:
        if not self._nodes:
            return None
        return self._nodes.pop()

    def top(self) -> Optional[DecisionNode]:
        return self._nodes[-1] if self._nodes else None

    def is_empty_or_root(self) -> bool:
        return len(self._nodes) <= 1

    @property
    def depth(self) -> int:
        return len(self._nodes)

    def page_ids(self) -> List[str]:
        return [n.page_id for n in self._nodes]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[DecisionNode]:
        return iter(list(self._nodes))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DecisionStack):
            return NotImplemented
        return self._nodes == other._nodes

    def __repr__(self) -> str:
        return f"DecisionStack({self.page_ids()!r})"

    # --- persistence ------------------------------------------------------
    def to_json(self) -> List[Dict[str, Any]]:
        return [n.to_json() for n in self._nodes]

    @classmethod
    def from_json(cls, data: List[Dict[str, Any]]) -> "DecisionStack":
        return cls([DecisionNode.from_json(item) for item in data])
