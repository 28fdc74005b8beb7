"""
In-memory quiz used to drive the traversal engine without a browser.

Pages form a tree: each page has a shape and a successor, which is either a
fixed page id or a function of the answer given on the page. Applying an
answer on a capture page records the full path of answers as one artifact.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from quiz_explorer.candidates import Candidate, FieldKind, ShapeDescriptor, ShapeKind
from quiz_explorer.errors import TransientDriverFailure

Path = Tuple[Tuple[str, Candidate], ...]
Successor = Union[str, Callable[[Candidate], Optional[str]], None]


@dataclass
class FakePage:
    shape: ShapeDescriptor
    next_page: Successor = None


class FakeSite:
    """Implements both PageDriver and NetworkObserver."""

    def __init__(
        self,
        pages: Dict[str, FakePage],
        root: str,
        capture_pages: Iterable[str] = (),
        submit_to: Optional[Dict[str, str]] = None,
        start_count: int = 0,
        stuck_pages: Iterable[str] = (),
        failing_pages: Iterable[str] = (),
    ) -> None:
        self.pages = pages
        self.root = root
        self.capture_pages = set(capture_pages)
        self.submit_to = dict(submit_to or {})
        self.stuck_pages = set(stuck_pages)
        self.failing_pages = set(failing_pages)
        self.history: List[str] = [root]
        self.answers: Dict[str, Candidate] = {}
        self.applied: List[Tuple[str, Candidate]] = []
        self.artifacts: List[Path] = []
        self.probes = 0
        self._start_count = start_count

    @property
    def current(self) -> str:
        return self.history[-1]

    def path(self) -> Path:
        return tuple((pid, self.answers[pid]) for pid in self.history if pid in self.answers)

    # --- PageDriver -------------------------------------------------------
    async def current_page_id(self) -> str:
        return self.current

    async def probe_shape(self) -> ShapeDescriptor:
        self.probes += 1
        return self.pages[self.current].shape

    async def apply_candidate(self, candidate: Candidate) -> None:
        page = self.current
        if page in self.failing_pages:
            raise TransientDriverFailure(f"element on {page} never became clickable", attempts=3)
        self.answers[page] = candidate
        self.applied.append((page, candidate))
        if page in self.capture_pages:
            self.artifacts.append(self.path())
            if page in self.submit_to:
                self.history.append(self.submit_to[page])

    async def navigate_forward(self) -> bool:
        page = self.current
        if page in self.stuck_pages or page not in self.answers:
            return False
        successor = self.pages[page].next_page
        if callable(successor):
            successor = successor(self.answers[page])
        if successor is None:
            return False
        self.answers.pop(successor, None)
        self.history.append(successor)
        return True

    async def navigate_back(self) -> bool:
        if len(self.history) < 2:
            return False
        self.history.pop()
        return True

    async def navigate_to_root(self) -> None:
        self.history = [self.root]
        self.answers.clear()

    # --- NetworkObserver --------------------------------------------------
    def artifacts_captured(self) -> int:
        return self._start_count + len(self.artifacts)


# --- layouts used across the test-suite ------------------------------------

def linear_pages():
    """intro (continue) -> concerns (up to 2 of 3) -> height (capture)."""
    return {
        "intro": FakePage(ShapeDescriptor(ShapeKind.PASSTHROUGH), "concerns"),
        "concerns": FakePage(ShapeDescriptor(ShapeKind.BOUNDED_MULTI, option_count=3, max_selections=2), "height"),
        "height": FakePage(ShapeDescriptor(ShapeKind.SCALAR, field_kind=FieldKind.HEIGHT)),
    }


def branching_pages():
    """sex: first option detours through pregnancy-weeks; e-mail submits to a loading sink."""
    return {
        "sex": FakePage(
            ShapeDescriptor(ShapeKind.SINGLE_CHOICE, option_count=2),
            lambda c: "pregnancy-weeks" if c.indices == (0,) else "e-mail",
        ),
        "pregnancy-weeks": FakePage(ShapeDescriptor(ShapeKind.SCALAR, field_kind=FieldKind.PREGNANCY_WEEKS), "e-mail"),
        "e-mail": FakePage(ShapeDescriptor(ShapeKind.SCALAR, field_kind=FieldKind.EMAIL)),
        "loading": FakePage(ShapeDescriptor(ShapeKind.SINK)),
    }


def two_level_pages():
    """plan (2 options) -> date-of-birth (3 dates, capture)."""
    return {
        "plan": FakePage(ShapeDescriptor(ShapeKind.SINGLE_CHOICE, option_count=2), "date-of-birth"),
        "date-of-birth": FakePage(ShapeDescriptor(ShapeKind.SCALAR, field_kind=FieldKind.DATE_OF_BIRTH)),
    }


SITES = {
    "linear": dict(pages=linear_pages, root="intro", capture_pages=("height",)),
    "branching": dict(pages=branching_pages, root="sex", capture_pages=("e-mail",), submit_to={"e-mail": "loading"}),
    "two_level": dict(pages=two_level_pages, root="plan", capture_pages=("date-of-birth",)),
}


def build_site(name, **overrides):
    layout = dict(SITES[name])
    layout["pages"] = layout["pages"]()
    layout.update(overrides)
    return FakeSite(**layout)
