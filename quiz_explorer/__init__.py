"""Quiz Explorer: exhaustive, resumable traversal of multi-step web quizzes.

Every reachable combination of answers is driven through the quiz once, and
the submission produced at the end of each path is captured. A run can be
stopped at any point and continued later without repeating or skipping a
path.

Key sub-modules:

candidates.py             – Answer (Candidate) and page shape data model.
candidate_generator.py    – Deterministic answer sequences per page shape.
frontier.py               – Per-page queues of answers not tried yet.
decision_stack.py         – Root-to-frontier path of applied answers.
traversal_engine.py       – The depth-first / backtracking step loop.
traversal_graph.py        – networkx map of which answer led where.
exploration_state.py      – Persistable bundle of stack, frontier and artifact count.
state_store.py            – Save (with backups), load and replay of that bundle.
config.py                 – QUIZ_* environment / .env settings.
exploration_policy.py     – End-to-end run against a live browser.

Browser-level operations live in the `quiz_playwright` package.
"""

from .candidates import Candidate, CandidateKind, FieldKind, ShapeDescriptor, ShapeKind
from .candidate_generator import generate_candidates
from .decision_stack import DecisionNode, DecisionStack
from .errors import (
    ExplorationError,
    FatalExplorationError,
    FrontierError,
    StateFileError,
    StructuralMismatch,
    TransientDriverFailure,
)
from .exploration_state import ExplorationState
from .frontier import FrontierCache
from .state_store import StateStore
from .traversal_engine import EngineStatus, TerminalReason, TraversalEngine
from .traversal_graph import TraversalGraph

__all__ = [
    "Candidate",
    "CandidateKind",
    "DecisionNode",
    "DecisionStack",
    "EngineStatus",
    "ExplorationError",
    "ExplorationState",
    "FatalExplorationError",
    "FieldKind",
    "FrontierCache",
    "FrontierError",
    "ShapeDescriptor",
    "ShapeKind",
    "StateFileError",
    "StateStore",
    "StructuralMismatch",
    "TerminalReason",
    "TransientDriverFailure",
    "TraversalEngine",
    "TraversalGraph",
    "generate_candidates",
]
