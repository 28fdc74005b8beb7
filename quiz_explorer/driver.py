"""
Contracts between the traversal engine and the outside world.

The engine only ever talks to these protocols, which keeps it testable
against a simulated quiz:

- PageDriver: reads where the browser is and what the page offers, applies
  answers and navigates
- NetworkObserver: reports how many target submissions were captured so far
"""

from __future__ import annotations
from typing import Protocol

from .candidates import Candidate, ShapeDescriptor


class PageDriver(Protocol):
    """Browser-side operations the engine needs.

    Every method is a coroutine; the engine awaits each one before deciding
    its next move.
    """

    async def current_page_id(self) -> str:
        """Page id of the current location (see ``page_id_from_url``)."""
        ...

    async def probe_shape(self) -> ShapeDescriptor:
        """Describe what can currently be selected or typed on the page."""
        ...

    async def apply_candidate(self, candidate: Candidate) -> None:
        """Clear previous selections where needed and apply ``candidate``.

        Raises ``TransientDriverFailure`` once its own retries are exhausted.
        """
        ...

    async def navigate_forward(self) -> bool:
        """Advance to the next page; return True if the page id changed."""
        ...

    async def navigate_back(self) -> bool:
        """Go back one page; return True if the page id changed."""
        ...

    async def navigate_to_root(self) -> None:
        """Open the quiz entry page in a clean session."""
        ...


class NetworkObserver(Protocol):
    """Counts captured target submissions."""

    def artifacts_captured(self) -> int:
        ...
