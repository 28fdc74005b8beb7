from __future__ import annotations

"""Depth-first, backtracking traversal of the quiz as an explicit step loop."""

import logging
from enum import Enum
from typing import Callable, Iterable, Optional, Tuple

from .candidates import Candidate
from .driver import NetworkObserver, PageDriver
from .errors import StructuralMismatch, TransientDriverFailure
from .exploration_state import ExplorationState
from .traversal_graph import TraversalGraph

logger = logging.getLogger(__name__)

FORWARD = "forward"
BACK = "back"


class EngineStatus(str, Enum):
    ARRIVED = "arrived"
    DESCENDING = "descending"
    BACKTRACKING = "backtracking"
    TERMINAL = "terminal"


class TerminalReason(str, Enum):
    COMPLETE = "complete"  # root exhausted, whole space enumerated
    BOUNDED = "bounded"  # artifact cap reached
    STUCK = "stuck"  # navigation stopped changing the page
    CANCELLED = "cancelled"


class TraversalEngine:
    """Walks every answer combination of the quiz, one page decision per step.

    Each call to :meth:`step` handles exactly one arrival: it either applies
    the next untried answer on the current page and moves forward, or, when
    the page has nothing left, retires it and moves back to its parent. All
    bookkeeping lives in the :class:`ExplorationState` handed in, so the run
    can be persisted between any two steps.
    """

    def __init__(
        self,
        driver: PageDriver,
        observer: NetworkObserver,
        state: ExplorationState | None = None,
        *,
        max_artifacts: int | None = None,
        root_page_id: str | None = None,
        capture_pages: Iterable[str] = (),
        stall_limit: int = 2,
        graph: TraversalGraph | None = None,
        on_step: Callable[["TraversalEngine"], None] | None = None,
    ) -> None:
        if stall_limit < 1:
            raise ValueError("stall_limit must be at least 1")
        self._driver = driver
        self._observer = observer
        self.state = state or ExplorationState()
        self._max_artifacts = max_artifacts
        self._root_page_id = root_page_id if root_page_id is not None else self.state.root_page_id
        self._capture_pages = frozenset(capture_pages)
        self._stall_limit = stall_limit
        self._graph = graph
        self._on_step = on_step

        self.status: EngineStatus = EngineStatus.ARRIVED
        self.terminal_reason: TerminalReason | None = None
        self.steps: int = 0

        self._last_page_id: str | None = None
        self._pending_navigation: str | None = None
        self._last_navigation: str | None = None
        self._stalls: int = 0
        self._last_descent: Optional[Tuple[str, Candidate]] = None
        self._cancel_requested: bool = False

    # ------------------------------------------------------------------
    @property
    def root_page_id(self) -> str | None:
        return self._root_page_id

    @property
    def is_terminal(self) -> bool:
        return self.status == EngineStatus.TERMINAL

    def snapshot(self) -> ExplorationState:
        """Return a copy of the state that replays to the current position.

        Right after backtracking, the top decision belongs to the page just
        returned to and its subtree is fully explored; replaying it would walk
        back into a retired page. The copy drops it, so a resumed run arrives
        on that page and continues with its next untried answer.
        """
        snapshot = ExplorationState.from_json(self.state.to_json())
        if self._last_navigation == BACK and snapshot.decision_stack.depth:
            snapshot.decision_stack.pop()
        return snapshot

    def cancel(self) -> None:
        """Ask the engine to stop at the top of its next step."""
        self._cancel_requested = True

    # ------------------------------------------------------------------
    async def run(self) -> TerminalReason:
        """Step until a terminal state is reached and return its reason."""
        logger.info(
            "Starting traversal (root=%r, stack depth=%d, frontier pages=%d, artifacts=%d)",
            self._root_page_id,
            self.state.decision_stack.depth,
            len(self.state.frontier),
            self.state.artifacts_captured,
        )
        self._sync_artifacts()
        if self._bound_reached():
            self._finish(TerminalReason.BOUNDED)
        while not self.is_terminal:
            await self.step()
            if self.is_terminal:
                break
            self._sync_artifacts()
            if self._bound_reached():
                self._finish(TerminalReason.BOUNDED)
                break
            if self._on_step is not None:
                self._on_step(self)
        logger.info(
            "Traversal finished: %s after %d steps, %d artifacts captured",
            self.terminal_reason.value if self.terminal_reason else None,
            self.steps,
            self.state.artifacts_captured,
        )
        return self.terminal_reason  # type: ignore[return-value]

    async def step(self) -> EngineStatus:
        """Handle one arrival on the current page."""
        if self.is_terminal:
            return self.status
        if self._cancel_requested:
            self._finish(TerminalReason.CANCELLED)
            return self.status

        self.steps += 1
        page_id = await self._driver.current_page_id()

        # 1. No movement since the last navigation ---------------------------
        if self._pending_navigation is not None and page_id == self._last_page_id:
            self._stalls += 1
            logger.warning(
                "Navigation %s did not leave page %r (%d/%d)",
                self._pending_navigation,
                page_id,
                self._stalls,
                self._stall_limit,
            )
            if self._stalls >= self._stall_limit:
                self._finish(TerminalReason.STUCK)
                return self.status
            await self._navigate(self._pending_navigation)
            return self.status

        self._stalls = 0
        self._pending_navigation = None
        self._on_arrival(page_id)

        stack = self.state.decision_stack
        frontier = self.state.frontier

        # 2. Discover the page's answers on first visit ----------------------
        if page_id not in frontier:
            shape = await self._driver.probe_shape()
            frontier.ensure(page_id, shape)

        # 3. Nothing left here: backtrack ------------------------------------
        if frontier.exhausted(page_id):
            frontier.retire(page_id)
            top = stack.top()
            # pages that offered nothing (sinks) never got a node of their own
            if top is not None and top.page_id == page_id:
                stack.pop()
            if page_id == self._root_page_id:
                self._finish(TerminalReason.COMPLETE)
                return self.status
            logger.debug("Page %r exhausted, backtracking (depth %d)", page_id, stack.depth)
            self.status = EngineStatus.BACKTRACKING
            await self._navigate(BACK)
            return self.status

        # 4. Try the next answer and descend ---------------------------------
        candidate = frontier.consume_head(page_id)
        logger.info("Page %r: trying %s", page_id, candidate.describe())
        try:
            await self._driver.apply_candidate(candidate)
        except TransientDriverFailure as exc:
            raise StructuralMismatch(
                f"Could not apply {candidate.describe()} on page {page_id!r}: {exc}", page_id
            ) from exc
        stack.push(page_id, candidate)
        self.status = EngineStatus.DESCENDING
        if page_id in self._capture_pages:
            # the answer itself submits; the next step may land on the same page
            self._last_descent = None
            self._last_navigation = None
            return self.status
        self._last_descent = (page_id, candidate)
        await self._navigate(FORWARD)
        return self.status

    # ------------------------------------------------------------------
    # Helpers -----------------------------------------------------------

    async def _navigate(self, direction: str) -> None:
        self._pending_navigation = direction
        self._last_navigation = direction
        if direction == FORWARD:
            moved = await self._driver.navigate_forward()
        else:
            moved = await self._driver.navigate_back()
        if not moved:
            logger.debug("Driver reported no page change after navigating %s", direction)

    def _on_arrival(self, page_id: str) -> None:
        self.status = EngineStatus.ARRIVED
        if self._root_page_id is None:
            self._root_page_id = page_id
            logger.info("Root page is %r", page_id)
        if self._graph is not None:
            self._graph.mark_visit(page_id)
            if self._last_descent is not None:
                src, candidate = self._last_descent
                self._graph.add_transition(src, candidate, page_id)
        self._last_descent = None
        self._last_page_id = page_id

    def _sync_artifacts(self) -> None:
        self.state.artifacts_captured = self._observer.artifacts_captured()

    def _bound_reached(self) -> bool:
        return self._max_artifacts is not None and self.state.artifacts_captured >= self._max_artifacts

    def _finish(self, reason: TerminalReason) -> None:
        self.status = EngineStatus.TERMINAL
        self.terminal_reason = reason
        if reason == TerminalReason.STUCK:
            logger.warning("No forward progress on page %r, stopping", self._last_page_id)
        elif reason == TerminalReason.BOUNDED:
            logger.info("Artifact cap of %s reached", self._max_artifacts)
