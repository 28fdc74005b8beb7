"""
State Store Test Suite

Covers saving with backups, loading, and replaying a stored path.
"""

import asyncio
import json

import pytest

from fake_site import build_site
from quiz_explorer.candidates import Candidate, ShapeDescriptor, ShapeKind
from quiz_explorer.decision_stack import DecisionStack
from quiz_explorer.errors import StateFileError, StructuralMismatch
from quiz_explorer.exploration_state import ExplorationState
from quiz_explorer.frontier import FrontierCache
from quiz_explorer import state_store
from quiz_explorer.state_store import StateStore


@pytest.fixture
def store(tmp_path):
    return StateStore(tmp_path / "exploration_state.json")


def make_state(artifacts=0):
    frontier = FrontierCache()
    frontier.ensure("plan", ShapeDescriptor(ShapeKind.SINGLE_CHOICE, option_count=2))
    stack = DecisionStack()
    stack.push("plan", frontier.consume_head("plan"))
    return ExplorationState(decision_stack=stack, frontier=frontier, artifacts_captured=artifacts)


class TestSaveAndLoad:
    def test_missing_file_loads_as_none(self, store):
        assert store.load() is None

    def test_round_trip(self, store):
        state = make_state(artifacts=3)
        assert store.save(state) is None

        loaded = store.load()
        assert loaded.to_json() == state.to_json()
        assert loaded.decision_stack == state.decision_stack

    def test_previous_file_is_backed_up_not_overwritten(self, store):
        first = make_state(artifacts=1)
        second = make_state(artifacts=2)
        store.save(first)
        backup = store.save(second)

        assert backup is not None and backup.exists()
        with open(backup, encoding="utf-8") as fh:
            assert json.load(fh) == first.to_json()
        assert store.load().artifacts_captured == 2

    def test_backups_in_the_same_second_get_distinct_names(self, store):
        for n in range(4):
            store.save(make_state(artifacts=n))

        backups = store.backups()
        assert len(backups) == 3
        assert len({b.name for b in backups}) == 3
        counts = []
        for path in backups:
            with open(path, encoding="utf-8") as fh:
                counts.append(json.load(fh)["artifacts_captured"])
        assert counts == [0, 1, 2]

    def test_no_temporary_file_left_behind(self, store):
        store.save(make_state())
        assert not store.path.with_name(store.path.name + ".tmp").exists()

    def test_creates_parent_directory(self, tmp_path):
        nested = StateStore(tmp_path / "runs" / "a" / "state.json")
        nested.save(make_state())
        assert nested.path.exists()

    def test_corrupt_file_raises_state_file_error(self, store):
        store.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StateFileError):
            store.load()

    def test_missing_field_raises_state_file_error(self, store):
        store.path.write_text(json.dumps({"decision_stack": [], "frontier": {}}), encoding="utf-8")
        with pytest.raises(StateFileError):
            store.load()

    def test_unknown_candidate_kind_raises_state_file_error(self, store):
        data = make_state().to_json()
        data["frontier"]["plan"] = [{"kind": "telepathy", "value": None}]
        store.path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(StateFileError):
            store.load()


class TestReplay:
    def test_replay_reapplies_decisions_and_lands_on_frontier(self, store):
        site = build_site("linear")
        state = ExplorationState(
            decision_stack=DecisionStack.from_json(
                [
                    {"page_id": "intro", "candidate": {"kind": "pass", "value": None}},
                    {"page_id": "concerns", "candidate": {"kind": "option_set", "value": [0, 2]}},
                ]
            )
        )
        asyncio.run(store.replay(state, site))

        assert site.current == "height"
        assert site.applied == [("intro", Candidate.passthrough()), ("concerns", Candidate.options((0, 2)))]

    def test_empty_stack_just_opens_root(self, store):
        site = build_site("linear")
        site.history.append("concerns")
        asyncio.run(store.replay(ExplorationState(), site))

        assert site.history == ["intro"]
        assert site.applied == []

    def test_capture_decision_is_not_resubmitted(self, store):
        site = build_site("two_level")
        stack = DecisionStack()
        stack.push("plan", Candidate.options((1,)))
        stack.push("date-of-birth", Candidate.text("16/06/1979"))
        asyncio.run(store.replay(ExplorationState(decision_stack=stack), site, site.capture_pages))

        assert site.current == "date-of-birth"
        assert site.applied == [("plan", Candidate.options((1,)))]
        assert site.artifacts == []

    def test_capture_decision_must_be_last(self, store):
        site = build_site("two_level")
        stack = DecisionStack()
        stack.push("plan", Candidate.options((0,)))
        stack.push("date-of-birth", Candidate.text("11/02/2004"))
        stack.push("thanks", Candidate.passthrough())

        with pytest.raises(StructuralMismatch):
            asyncio.run(store.replay(ExplorationState(decision_stack=stack), site, site.capture_pages))

    def test_wrong_page_raises(self, store):
        site = build_site("linear")
        stack = DecisionStack()
        stack.push("concerns", Candidate.options((0,)))

        with pytest.raises(StructuralMismatch) as excinfo:
            asyncio.run(store.replay(ExplorationState(decision_stack=stack), site))
        assert excinfo.value.page_id == "concerns"

    def test_changed_shape_raises(self, store):
        site = build_site("linear")
        stack = DecisionStack()
        stack.push("intro", Candidate.passthrough())
        stack.push("concerns", Candidate.options((5,)))

        with pytest.raises(StructuralMismatch):
            asyncio.run(store.replay(ExplorationState(decision_stack=stack), site))
        assert site.applied == [("intro", Candidate.passthrough())]

    def test_forward_failure_raises(self, store):
        site = build_site("linear", stuck_pages={"intro"})
        stack = DecisionStack()
        stack.push("intro", Candidate.passthrough())

        with pytest.raises(StructuralMismatch):
            asyncio.run(store.replay(ExplorationState(decision_stack=stack), site))

    def test_driver_failure_raises_structural_mismatch(self, store):
        site = build_site("linear", failing_pages={"intro"})
        stack = DecisionStack()
        stack.push("intro", Candidate.passthrough())

        with pytest.raises(StructuralMismatch):
            asyncio.run(store.replay(ExplorationState(decision_stack=stack), site))


class TestSaveFailure:
    def test_failed_write_keeps_previous_document(self, store, monkeypatch):
        store.save(make_state(artifacts=7))

        def broken_dump(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(state_store.json, "dump", broken_dump)
        with pytest.raises(OSError):
            store.save(make_state(artifacts=8))
        monkeypatch.undo()

        loaded = store.load()
        assert loaded is not None
        assert loaded.artifacts_captured == 7
        assert store.backups() == []
        assert not store.path.with_name(store.path.name + ".tmp").exists()

    def test_state_path_is_never_missing_after_a_backup(self, store):
        store.save(make_state(artifacts=1))
        backup = store.save(make_state(artifacts=2))

        assert store.path.exists()
        assert backup.exists()

    def test_frontier_of_wrong_type_raises_state_file_error(self, store):
        data = make_state().to_json()
        data["frontier"] = []
        store.path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(StateFileError):
            store.load()
