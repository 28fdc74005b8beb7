from __future__ import annotations

"""The unit of persistence: decision stack, frontier cache and artifact count."""

from dataclasses import dataclass, field
from typing import Any, Dict

from .decision_stack import DecisionStack
from .frontier import CandidateGenerator, FrontierCache


@dataclass
class ExplorationState:
    decision_stack: DecisionStack = field(default_factory=DecisionStack)
    frontier: FrontierCache = field(default_factory=FrontierCache)
    artifacts_captured: int = 0

    @property
    def root_page_id(self) -> str | None:
        """Page id at the bottom of the decision stack, if anything was decided yet."""
        for node in self.decision_stack:
            return node.page_id
        return None

    # ------------------------------------------------------------------
    # persistence -------------------------------------------------------

    def to_json(self) -> Dict[str, Any]:
        """Serialize into the three-field state document."""
        return {
            "decision_stack": self.decision_stack.to_json(),
            "frontier": self.frontier.to_json(),
            "artifacts_captured": self.artifacts_captured,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any], generator: CandidateGenerator | None = None) -> "ExplorationState":
        return cls(
            decision_stack=DecisionStack.from_json(data["decision_stack"]),
            frontier=FrontierCache.from_json(data["frontier"], generator),
            artifacts_captured=int(data["artifacts_captured"]),
        )
