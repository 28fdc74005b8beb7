from __future__ import annotations

"""Deterministic candidate generation for every page shape.

Everything in here is a pure function of its arguments. A resumed run trusts
the queues it persisted instead of regenerating them, but a fresh visit to a
page must reproduce exactly the same order as the run before it did.
"""

from typing import Dict, List, Sequence, Tuple

from .candidates import Candidate, FieldKind, ShapeDescriptor, ShapeKind


# Hand-picked representative values per field. Dates are DD/MM/YYYY as the
# quiz expects them; numeric pools cover the low, typical and high ends.
SCALAR_POOLS: Dict[FieldKind, Tuple[str | int, ...]] = {
    FieldKind.DATE_OF_BIRTH: ("11/02/2004", "16/06/1979", "27/01/1955"),
    FieldKind.HEIGHT: (160, 190),
    FieldKind.WEIGHT: (50, 75, 90, 110),
    FieldKind.PREGNANCY_WEEKS: (8, 16, 24, 32, 40),
    FieldKind.EMAIL: ("asdf@gmail.com",),
    FieldKind.FREE_TEXT: ("John Doe",),
}


def index_combinations(count: int, max_selections: int | None = None) -> List[Tuple[int, ...]]:
    """Return every non-empty subset of ``range(count)`` up to ``max_selections`` long.

    Subsets come out in prefix-extension order: each prefix is emitted before
    the subsets that extend it, and extensions are tried in ascending index
    order, so ``count=3`` gives ``(0,), (0, 1), (0, 1, 2), (0, 2), (1,), (1, 2), (2,)``.
    """
    limit = count if max_selections is None else max_selections
    results: List[Tuple[int, ...]] = []

    def _extend(prefix: Tuple[int, ...], start: int) -> None:
        if prefix:
            results.append(prefix)
        if len(prefix) >= limit:
            return
        for i in range(start, count):
            _extend(prefix + (i,), i + 1)

    _extend((), 0)
    return results


def bounded_combinations(count: int, max_selections: int, include_empty: bool = False) -> List[Candidate]:
    candidates = [Candidate.options(combo) for combo in index_combinations(count, max_selections)]
    if include_empty:
        candidates.append(Candidate.options(()))
    return candidates


def exclusive_combinations(
    count: int, exclusive_index: int, max_selections: int | None = None
) -> List[Candidate]:
    """Subsets that never mix the exclusive option with anything else.

    The exclusive option is tried exactly once, on its own, after every other
    subset.
    """
    candidates = [
        Candidate.options(combo)
        for combo in index_combinations(count, max_selections)
        if exclusive_index not in combo
    ]
    candidates.append(Candidate.options((exclusive_index,)))
    return candidates


def pairs_then_singletons(count: int) -> List[Candidate]:
    candidates = [Candidate.pair(i, j) for i in range(count) for j in range(i + 1, count)]
    candidates.extend(Candidate.options((i,)) for i in range(count))
    return candidates


def single_choices(count: int) -> List[Candidate]:
    return [Candidate.options((i,)) for i in range(count)]


def scalar_pool(field_kind: FieldKind) -> List[Candidate]:
    pool = SCALAR_POOLS[field_kind]
    return [Candidate.number(v) if isinstance(v, (int, float)) else Candidate.text(v) for v in pool]


def text_combinations(values: Sequence[str], max_selections: int | None = None) -> List[Candidate]:
    """Subsets of a text pool, with the empty selection tried last."""
    candidates = [
        Candidate.texts(values[i] for i in combo)
        for combo in index_combinations(len(values), max_selections)
    ]
    candidates.append(Candidate.texts(()))
    return candidates


def generate_candidates(shape: ShapeDescriptor) -> List[Candidate]:
    """Map a page shape to the ordered list of answers to try on it."""
    kind = shape.kind
    if kind == ShapeKind.SINGLE_CHOICE:
        return single_choices(shape.option_count)
    if kind == ShapeKind.BOUNDED_MULTI:
        limit = shape.max_selections if shape.max_selections is not None else shape.option_count
        return bounded_combinations(shape.option_count, limit, include_empty=shape.include_empty)
    if kind == ShapeKind.EXCLUSIVE_MULTI:
        if shape.option_count <= 0:
            return []
        exclusive = shape.exclusive_index if shape.exclusive_index is not None else shape.option_count - 1
        return exclusive_combinations(shape.option_count, exclusive, shape.max_selections)
    if kind == ShapeKind.PAIRWISE:
        return pairs_then_singletons(shape.option_count)
    if kind == ShapeKind.SCALAR:
        return scalar_pool(shape.field_kind or FieldKind.FREE_TEXT)
    if kind == ShapeKind.TEXT_MULTI:
        return text_combinations(shape.values, shape.max_selections)
    if kind == ShapeKind.PASSTHROUGH:
        return [Candidate.passthrough()]
    if kind == ShapeKind.SINK:
        return []
    raise ValueError(f"Unsupported page shape: {kind!r}")
