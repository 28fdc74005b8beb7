from __future__ import annotations

"""Per-page queues of answers that have not been tried yet."""

import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional

from .candidate_generator import generate_candidates
from .candidates import Candidate, ShapeDescriptor
from .errors import FrontierError

logger = logging.getLogger(__name__)

CandidateGenerator = Callable[[ShapeDescriptor], List[Candidate]]


class FrontierCache:
    """Mapping page id -> remaining candidate queue.

    Entries are created lazily on the first visit to a page, lose their head
    every time the engine commits to a candidate, and are removed with
    :meth:`retire` once the engine sees them empty. A drained entry is kept
    until then so that coming back to the page backtracks instead of
    regenerating its answers.
    """

    def __init__(self, generator: CandidateGenerator | None = None) -> None:
        self._generator: CandidateGenerator = generator or generate_candidates
        self._queues: Dict[str, Deque[Candidate]] = {}

    # ------------------------------------------------------------------
    def ensure(self, page_id: str, shape: ShapeDescriptor) -> bool:
        """Install the candidate queue for ``page_id`` unless one exists.

        Returns True when a new queue was generated.
        """
        if page_id in self._queues:
            return False
        queue = deque(self._generator(shape))
        self._queues[page_id] = queue
        logger.debug("Generated %d candidates for page %r (%s)", len(queue), page_id, shape.kind.value)
        return True

    def peek(self, page_id: str) -> Optional[Candidate]:
        queue = self._queues.get(page_id)
        if not queue:
            return None
        return queue[0]

    def consume_head(self, page_id: str) -> Candidate:
        queue = self._queues.get(page_id)
        if queue is None:
            raise FrontierError(f"No frontier entry for page {page_id!r}")
        if not queue:
            raise FrontierError(f"Frontier for page {page_id!r} is exhausted")
        return queue.popleft()

    def exhausted(self, page_id: str) -> bool:
        return not self._queues.get(page_id)

    def retire(self, page_id: str) -> None:
        self._queues.pop(page_id, None)

    def remaining(self, page_id: str) -> List[Candidate]:
        return list(self._queues.get(page_id, ()))

    # ------------------------------------------------------------------
    def __contains__(self, page_id: object) -> bool:
        return page_id in self._queues

    def __len__(self) -> int:
        return len(self._queues)

    def __iter__(self) -> Iterator[str]:
        return iter(self._queues)

    # --- persistence ------------------------------------------------------
    def to_json(self) -> Dict[str, Any]:
        return {pid: [c.to_json() for c in queue] for pid, queue in self._queues.items()}

    @classmethod
    def from_json(cls, data: Dict[str, Any], generator: CandidateGenerator | None = None) -> "FrontierCache":
        cache = cls(generator)
        for pid, items in data.items():
            cache._queues[pid] = deque(Candidate.from_json(item) for item in items)
        return cache
