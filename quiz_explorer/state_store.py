from __future__ import annotations

"""Durable storage of the exploration state and replay of a stored path."""

import json
import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List

from .driver import PageDriver
from .errors import StateFileError, StructuralMismatch, TransientDriverFailure
from .exploration_state import ExplorationState
from .frontier import CandidateGenerator

logger = logging.getLogger(__name__)


class StateStore:
    """Reads and writes the state document at ``path``.

    A previous document is never overwritten: the new one is first written
    and flushed to a temporary sibling, the previous one is then copied to a
    timestamped backup, and only then is the new one moved into place. The
    state path always holds a complete document.
    """

    def __init__(self, path: str | os.PathLike, generator: CandidateGenerator | None = None) -> None:
        self.path = Path(path)
        self._generator = generator

    # ------------------------------------------------------------------
    def save(self, state: ExplorationState) -> Path | None:
        """Write ``state``; returns the backup path if an older file was copied aside."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(state.to_json(), fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
        backup = self._backup_existing()
        os.replace(tmp_path, self.path)
        logger.info(
            "Saved exploration state to %s (depth %d, %d frontier pages, %d artifacts)",
            self.path,
            state.decision_stack.depth,
            len(state.frontier),
            state.artifacts_captured,
        )
        return backup

    def load(self) -> ExplorationState | None:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
            state = ExplorationState.from_json(data, self._generator)
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as exc:
            raise StateFileError(f"Cannot read exploration state from {self.path}: {exc}") from exc
        logger.info(
            "Loaded exploration state from %s (depth %d, %d artifacts)",
            self.path,
            state.decision_stack.depth,
            state.artifacts_captured,
        )
        return state

    def backups(self) -> List[Path]:
        """Backup files for this state file, oldest first."""
        pattern = f"{self.path.stem}.*.bak{self.path.suffix}"

        def _order(p: Path) -> tuple:
            # <stem>.<stamp>.<counter>.bak<suffix>
            parts = p.name[len(self.path.stem) + 1 :].split(".")
            counter = int(parts[1]) if len(parts) > 1 and parts[1].isdigit() else 0
            return (parts[0], counter)

        return sorted(self.path.parent.glob(pattern), key=_order)

    def _backup_existing(self) -> Path | None:
        if not self.path.exists():
            return None
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        counter = 0
        while True:
            candidate = self.path.with_name(f"{self.path.stem}.{stamp}.{counter}.bak{self.path.suffix}")
            if not candidate.exists():
                break
            counter += 1
        shutil.copy2(self.path, candidate)
        logger.debug("Copied previous state file to %s", candidate)
        return candidate

    # ------------------------------------------------------------------
    async def replay(
        self,
        state: ExplorationState,
        driver: PageDriver,
        capture_pages: Iterable[str] = (),
    ) -> None:
        """Bring a fresh session back to where ``state`` left off.

        Every recorded decision is re-applied as-is, from the root down. The
        frontier queues are left untouched; the engine carries on with them.
        """
        capture = frozenset(capture_pages)
        nodes = list(state.decision_stack)
        await driver.navigate_to_root()
        if not nodes:
            return
        logger.info("Replaying %d recorded decisions", len(nodes))
        for position, node in enumerate(nodes):
            page_id = await driver.current_page_id()
            if page_id != node.page_id:
                raise StructuralMismatch(
                    f"Replay step {position}: expected page {node.page_id!r}, found {page_id!r}",
                    node.page_id,
                )
            if node.page_id in capture:
                # already submitted before the snapshot; resume with the next answer
                if position != len(nodes) - 1:
                    raise StructuralMismatch(
                        f"Capture page {node.page_id!r} is not the last recorded decision", node.page_id
                    )
                logger.debug("Replay stops on capture page %r", node.page_id)
                return
            shape = await driver.probe_shape()
            if not shape.accepts(node.candidate):
                raise StructuralMismatch(
                    f"Page {node.page_id!r} ({shape.kind.value}) no longer accepts {node.candidate.describe()}",
                    node.page_id,
                )
            try:
                await driver.apply_candidate(node.candidate)
            except TransientDriverFailure as exc:
                raise StructuralMismatch(
                    f"Replay could not apply {node.candidate.describe()} on {node.page_id!r}: {exc}",
                    node.page_id,
                ) from exc
            if not await driver.navigate_forward():
                raise StructuralMismatch(f"Replay could not leave page {node.page_id!r}", node.page_id)
        logger.info("Replay finished on page %r", await driver.current_page_id())
