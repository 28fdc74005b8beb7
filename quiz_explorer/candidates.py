from __future__ import annotations

"""Data model for the answers the explorer tries and the page shapes they come from.

A :class:`Candidate` is an opaque payload as far as the traversal engine is
concerned; only the page driver knows how to turn one into clicks and key
presses. A :class:`ShapeDescriptor` is what the driver reports about the page
it is looking at, and is the only input candidate generation depends on.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple, Union


class CandidateKind(str, Enum):
    """Variants of an answer."""

    OPTION_SET = "option_set"
    PAIR = "pair"
    TEXT = "text"
    NUMBER = "number"
    TEXT_SET = "text_set"
    PASS = "pass"


class ShapeKind(str, Enum):
    """Answer-space categories a page can present."""

    SINGLE_CHOICE = "single_choice"
    BOUNDED_MULTI = "bounded_multi"
    EXCLUSIVE_MULTI = "exclusive_multi"
    PAIRWISE = "pairwise"
    SCALAR = "scalar"
    TEXT_MULTI = "text_multi"
    PASSTHROUGH = "passthrough"
    SINK = "sink"


class FieldKind(str, Enum):
    """Semantics of a free-form input field, used to pick a scalar pool."""

    DATE_OF_BIRTH = "date_of_birth"
    HEIGHT = "height"
    WEIGHT = "weight"
    PREGNANCY_WEEKS = "pregnancy_weeks"
    EMAIL = "email"
    FREE_TEXT = "free_text"


CandidateValue = Union[Tuple[int, ...], Tuple[str, ...], str, int, float, None]


@dataclass(frozen=True)
class Candidate:
    """One concrete answer to try on a page."""

    kind: CandidateKind
    value: CandidateValue = None

    # --- constructors -----------------------------------------------------
    @classmethod
    def options(cls, indices: Any) -> "Candidate":
        return cls(CandidateKind.OPTION_SET, tuple(int(i) for i in indices))

    @classmethod
    def pair(cls, first: int, second: int) -> "Candidate":
        return cls(CandidateKind.PAIR, (int(first), int(second)))

    @classmethod
    def text(cls, value: str) -> "Candidate":
        return cls(CandidateKind.TEXT, str(value))

    @classmethod
    def number(cls, value: int | float) -> "Candidate":
        return cls(CandidateKind.NUMBER, value)

    @classmethod
    def texts(cls, values: Any) -> "Candidate":
        return cls(CandidateKind.TEXT_SET, tuple(str(v) for v in values))

    @classmethod
    def passthrough(cls) -> "Candidate":
        return cls(CandidateKind.PASS, None)

    # --- helpers ----------------------------------------------------------
    @property
    def indices(self) -> Tuple[int, ...]:
        """Option indices selected by this candidate (empty for non-index kinds)."""
        if self.kind in (CandidateKind.OPTION_SET, CandidateKind.PAIR):
            return tuple(self.value)  # type: ignore[arg-type]
        return ()

    def describe(self) -> str:
        if self.kind in (CandidateKind.OPTION_SET, CandidateKind.PAIR):
            # humans count options from one
            return "options " + ",".join(str(i + 1) for i in self.indices) if self.indices else "no options"
        if self.kind == CandidateKind.TEXT_SET:
            return ", ".join(self.value) if self.value else "nothing"  # type: ignore[arg-type]
        if self.kind == CandidateKind.PASS:
            return "continue"
        return repr(self.value)

    # --- persistence ------------------------------------------------------
    def to_json(self) -> Dict[str, Any]:
        value = self.value
        if isinstance(value, tuple):
            value = list(value)
        return {"kind": self.kind.value, "value": value}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Candidate":
        kind = CandidateKind(data["kind"])
        value = data.get("value")
        if kind in (CandidateKind.OPTION_SET, CandidateKind.PAIR):
            return cls(kind, tuple(int(i) for i in value))
        if kind == CandidateKind.TEXT_SET:
            return cls(kind, tuple(str(v) for v in value))
        if kind == CandidateKind.PASS:
            return cls(kind, None)
        return cls(kind, value)


@dataclass(frozen=True)
class ShapeDescriptor:
    """What a page currently lets the user do.

    ``option_count`` is the number of selectable options, ``exclusive_index``
    the position of a "none of the above" style option, ``field_kind`` the
    semantics of a single input field and ``values`` a fixed text pool for
    autocomplete-style pages.
    """

    kind: ShapeKind
    option_count: int = 0
    max_selections: int | None = None
    exclusive_index: int | None = None
    field_kind: FieldKind | None = None
    include_empty: bool = False
    values: Tuple[str, ...] = field(default_factory=tuple)

    def accepts(self, candidate: Candidate) -> bool:
        """Return True if ``candidate`` can be applied to a page of this shape.

        Used during replay to detect that a recorded page changed under us.
        """
        if self.kind == ShapeKind.SINK:
            return False
        if candidate.kind in (CandidateKind.OPTION_SET, CandidateKind.PAIR):
            if self.kind not in (
                ShapeKind.SINGLE_CHOICE,
                ShapeKind.BOUNDED_MULTI,
                ShapeKind.EXCLUSIVE_MULTI,
                ShapeKind.PAIRWISE,
            ):
                return False
            return all(0 <= i < self.option_count for i in candidate.indices)
        if candidate.kind in (CandidateKind.TEXT, CandidateKind.NUMBER):
            return self.kind == ShapeKind.SCALAR
        if candidate.kind == CandidateKind.TEXT_SET:
            return self.kind == ShapeKind.TEXT_MULTI and set(candidate.value or ()) <= set(self.values)
        return self.kind == ShapeKind.PASSTHROUGH
