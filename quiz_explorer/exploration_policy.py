from __future__ import annotations

"""End-to-end exploration run: browser session, resume, traversal, shutdown."""

import asyncio
import json
import logging
import os
import signal
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from typing import Any, AsyncContextManager, AsyncIterator, Callable, Dict, Tuple

from quiz_playwright.browser.local_playwright_browser import LocalPlaywrightBrowser
from quiz_playwright.network_observer import PayloadObserver
from quiz_playwright.quiz_driver import PlaywrightQuizDriver

from .config import ExplorerConfig
from .driver import NetworkObserver, PageDriver
from .errors import FatalExplorationError
from .exploration_state import ExplorationState
from .state_store import StateStore
from .traversal_engine import TerminalReason, TraversalEngine
from .traversal_graph import TraversalGraph

logger = logging.getLogger(__name__)


@dataclass
class ExplorationResult:
    reason: TerminalReason
    steps: int
    artifacts_captured: int
    resumed: bool
    stack_depth: int
    frontier_pages: int

    def to_json(self) -> Dict[str, Any]:
        data = asdict(self)
        data["reason"] = self.reason.value
        return data


Session = Tuple[PageDriver, NetworkObserver]
SessionFactory = Callable[[ExplorationState], AsyncContextManager[Session]]


class ExplorationAgent:
    """High-level orchestrator around :class:`TraversalEngine`.

    Loads and replays any saved state, runs the engine against a live
    browser, and saves the state again when the engine stops. A fatal
    error skips the final save so the last good snapshot is kept.

    ``session`` opens the driver / observer pair for a run; it defaults to a
    local Chromium session and is handed the loaded state so the observer can
    number payloads on from the saved count.
    """

    def __init__(self, config: ExplorerConfig, session: SessionFactory | None = None) -> None:
        self.config = config
        self._session: SessionFactory = session or self._playwright_session
        self._store = StateStore(config.state_file)
        self._graph = TraversalGraph()
        self._engine: TraversalEngine | None = None
        os.makedirs(config.output_dir, exist_ok=True)

    @property
    def graph(self) -> TraversalGraph:
        return self._graph

    def cancel(self) -> None:
        if self._engine is not None:
            logger.info("Cancellation requested")
            self._engine.cancel()

    # ------------------------------------------------------------------
    async def explore(self) -> ExplorationResult:
        """Entry-point of the run."""
        config = self.config
        state = self._store.load() if config.resume else None
        resumed = state is not None
        if state is None:
            state = ExplorationState()

        async with self._session(state) as (driver, observer):
            self._engine = TraversalEngine(
                driver,
                observer,
                state,
                max_artifacts=config.max_artifacts,
                root_page_id=config.root_page_id,
                capture_pages=config.capture_pages,
                stall_limit=config.stall_limit,
                graph=self._graph,
                on_step=self._checkpoint,
            )
            self._install_signal_handler()
            try:
                if resumed:
                    await self._store.replay(state, driver, config.capture_pages)
                else:
                    await driver.navigate_to_root()
                reason = await self._engine.run()
            except FatalExplorationError:
                logger.exception("Exploration aborted; last saved state left at %s", self._store.path)
                raise
            finally:
                self._remove_signal_handler()

        saved = self._engine.snapshot()
        self._store.save(saved)
        result = ExplorationResult(
            reason=reason,
            steps=self._engine.steps,
            artifacts_captured=saved.artifacts_captured,
            resumed=resumed,
            stack_depth=saved.decision_stack.depth,
            frontier_pages=len(saved.frontier),
        )
        self._write_artifacts(result)
        return result

    # ------------------------------------------------------------------
    # Helpers -----------------------------------------------------------

    @asynccontextmanager
    async def _playwright_session(self, state: ExplorationState) -> AsyncIterator[Session]:
        config = self.config
        async with LocalPlaywrightBrowser(headless=config.headless, blocked_hosts=config.blocked_hosts) as browser:
            page = await browser.browser_context.new_page()

            observer = PayloadObserver(
                payload_dir=config.payload_dir,
                capture_endpoint=config.capture_endpoint,
                start_count=state.artifacts_captured,
                max_artifacts=config.max_artifacts,
            )
            await observer.attach(page)

            driver = PlaywrightQuizDriver(
                page,
                start_url=config.start_url,
                navigation_timeout_ms=config.navigation_timeout_ms,
                action_delay_ms=config.action_delay_ms,
                retry_attempts=config.retry_attempts,
            )
            await driver.install_history_guard()
            yield driver, observer

    def _checkpoint(self, engine: TraversalEngine) -> None:
        every = self.config.checkpoint_every
        if every and engine.steps % every == 0:
            self._store.save(engine.snapshot())

    def _write_artifacts(self, result: ExplorationResult) -> None:
        out = self.config.output_dir
        with open(os.path.join(out, "run_summary.json"), "w", encoding="utf-8") as fh:
            json.dump(result.to_json(), fh, indent=2)
        try:
            self._graph.write_graphml(os.path.join(out, "traversal.graphml"))
        except Exception as e:
            logger.warning(f"Failed to write GraphML: {e}")
        with open(os.path.join(out, "traversal.json"), "w", encoding="utf-8") as fh:
            json.dump(self._graph.to_json(), fh, indent=2)

    def _install_signal_handler(self) -> None:
        try:
            asyncio.get_running_loop().add_signal_handler(signal.SIGINT, self.cancel)
        except (NotImplementedError, RuntimeError):
            # not available on this platform / loop
            pass

    def _remove_signal_handler(self) -> None:
        try:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass
