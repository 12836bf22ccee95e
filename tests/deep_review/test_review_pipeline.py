"""End-to-end tests for deep_review.pipeline.process_event."""

import pytest

from deep_review.config import DispatchConfig, settings_providers
from deep_review.evaluator import STALE_GUARD_MS
from deep_review.kinds import get_reviewer
from deep_review.pipeline import (
    ACCUMULATED,
    DISPATCH_FAILED,
    DISPATCHED,
    IN_PROGRESS,
    SKIPPED,
    process_event,
)
from deep_review.state import SessionState, StateStore

from deep_review.dispatcher import SubprocessDispatcher

from _review_fixtures import FakePopen, RecordingDispatcher, make_event, write_settings

CHECK_TESTS = get_reviewer("checktests")
NOW = 1_700_000_000_000


def run(event, store, dispatcher, config=None, label=None, at_ms=NOW):
    return process_event(
        CHECK_TESTS,
        event,
        store=store,
        dispatcher=dispatcher,
        config=config or DispatchConfig(edit_threshold=3),
        session_label=label,
        at_ms=at_ms,
    )


class TestAccumulateAndDispatch:
    def test_three_distinct_files_dispatch_on_third(self, project_dir, store, dispatcher):
        outcomes = [
            run(make_event(project_dir, f), store, dispatcher) for f in ["a.py", "b.py", "c.py"]
        ]

        assert [o.status for o in outcomes] == [ACCUMULATED, ACCUMULATED, DISPATCHED]
        assert len(dispatcher.requests) == 1
        assert dispatcher.requests[0].files == ("a.py", "b.py", "c.py")
        state = store.load("checktests", "sess-1")
        assert state.edit_count == 0
        assert state.edited_files == []
        assert state.last_dispatch_at == NOW

    def test_edit_after_dispatch_starts_new_window(self, project_dir, store, dispatcher):
        for f in ["a.py", "b.py", "c.py"]:
            run(make_event(project_dir, f), store, dispatcher)

        outcome = run(make_event(project_dir, "d.py"), store, dispatcher)

        assert outcome.status == ACCUMULATED
        assert outcome.edit_count == 1
        assert store.load("checktests", "sess-1").edited_files == ["d.py"]
        assert len(dispatcher.requests) == 1

    def test_same_file_repeatedly(self, project_dir, store, dispatcher):
        outcomes = [run(make_event(project_dir, "a.py"), store, dispatcher) for _ in range(5)]

        assert outcomes[2].status == DISPATCHED
        assert dispatcher.requests[0].files == ("a.py",)
        assert [o.edit_count for o in outcomes[3:]] == [1, 2]

    def test_threshold_is_clamped(self, project_dir, store, dispatcher):
        config = DispatchConfig(edit_threshold=100)

        outcomes = [run(make_event(project_dir, "a.py"), store, dispatcher, config) for _ in range(7)]

        assert outcomes[5].status == ACCUMULATED
        assert outcomes[6].status == DISPATCHED
        assert outcomes[6].threshold == 7

    def test_queue_id_from_session_title(self, project_dir, store, dispatcher):
        for f in ["a.py", "b.py", "c.py"]:
            outcome = run(make_event(project_dir, f), store, dispatcher, label="Dev Sprint")

        assert dispatcher.requests[0].queue_id == "dev-sprint-qa"
        assert outcome.queue_id == "dev-sprint-qa"

    def test_sessions_are_independent(self, project_dir, store, dispatcher):
        run(make_event(project_dir, "a.py", session_id="one"), store, dispatcher)
        run(make_event(project_dir, "a.py", session_id="two"), store, dispatcher)

        assert store.load("checktests", "one").edit_count == 1
        assert store.load("checktests", "two").edit_count == 1


class TestIrrelevantEvents:
    """Skipped events never touch state."""

    def test_keyword_mismatch_no_mutation(self, project_dir, store, dispatcher, state_dir):
        outcome = run(make_event(project_dir), store, dispatcher, label="release-prep")

        assert outcome.status == SKIPPED
        assert outcome.reason == "keyword_mismatch"
        assert not state_dir.exists()

    def test_non_edit_tool(self, project_dir, store, dispatcher, state_dir):
        outcome = run(make_event(project_dir, tool_name="Read"), store, dispatcher)

        assert outcome.reason == "not_edit_tool"
        assert not state_dir.exists()

    def test_disabled_config(self, project_dir, store, dispatcher, state_dir):
        config = DispatchConfig(enabled=False)

        outcome = run(make_event(project_dir), store, dispatcher, config)

        assert outcome.reason == "disabled"
        assert not state_dir.exists()

    def test_config_loaded_from_providers(self, project_dir, store, dispatcher, tmp_path):
        write_settings(project_dir / ".claude" / "settings.json", "checkTestsConfig", {"enabled": False})

        outcome = process_event(
            CHECK_TESTS,
            make_event(project_dir),
            store=store,
            dispatcher=dispatcher,
            providers=settings_providers(project_dir, tmp_path / "global.json"),
        )

        assert outcome.reason == "disabled"


class TestDispatchFailure:
    def test_failure_keeps_window_and_clears_guard(self, project_dir, store):
        failing = RecordingDispatcher(fail=True)
        for f in ["a.py", "b.py"]:
            run(make_event(project_dir, f), store, failing)

        outcome = run(make_event(project_dir, "c.py"), store, failing)

        assert outcome.status == DISPATCH_FAILED
        assert "not found" in outcome.reason
        state = store.load("checktests", "sess-1")
        assert state.edit_count == 3
        assert state.edited_files == ["a.py", "b.py", "c.py"]
        assert state.dispatch_in_progress is False
        assert state.last_dispatch_at is None

    def test_next_edit_retries(self, project_dir, store):
        failing = RecordingDispatcher(fail=True)
        for f in ["a.py", "b.py", "c.py"]:
            run(make_event(project_dir, f), store, failing)

        working = RecordingDispatcher()
        outcome = run(make_event(project_dir, "d.py"), store, working)

        assert outcome.status == DISPATCHED
        assert working.requests[0].files == ("a.py", "b.py", "c.py", "d.py")


    def test_launch_value_error_lets_next_edit_retry(self, project_dir, store):
        broken = SubprocessDispatcher(
            which=lambda name: "/usr/bin/claude",
            popen=FakePopen(ValueError("embedded null byte")),
        )
        config = DispatchConfig(edit_threshold=3, review_prompt="review\x00 {files} {queueId}")
        outcomes = [
            run(make_event(project_dir, f), store, broken, config) for f in ["a.py", "b.py", "c.py"]
        ]

        assert outcomes[-1].status == DISPATCH_FAILED
        assert store.load("checktests", "sess-1").dispatch_in_progress is False

        working = RecordingDispatcher()
        outcome = run(make_event(project_dir, "d.py"), store, working, at_ms=NOW + 1)

        assert outcome.status == DISPATCHED
        assert working.requests[0].files == ("a.py", "b.py", "c.py", "d.py")

    def test_unexpected_error_clears_guard_and_propagates(self, project_dir, store):
        class ExplodingDispatcher(RecordingDispatcher):
            def dispatch(self, request):
                raise RuntimeError("boom")

        for f in ["a.py", "b.py"]:
            run(make_event(project_dir, f), store, RecordingDispatcher())

        with pytest.raises(RuntimeError):
            run(make_event(project_dir, "c.py"), store, ExplodingDispatcher())

        state = store.load("checktests", "sess-1")
        assert state.dispatch_in_progress is False
        assert state.edit_count == 3
        assert state.edited_files == ["a.py", "b.py", "c.py"]


class TestGuard:
    def _seed(self, store, marked_at):
        store.save(
            "checktests",
            "sess-1",
            SessionState(
                session_id="sess-1",
                edit_count=5,
                edited_files=["a.py"],
                dispatch_in_progress=True,
                dispatch_marked_at=marked_at,
            ),
        )

    def test_fresh_guard_blocks_dispatch(self, project_dir, store, dispatcher):
        self._seed(store, NOW - 1000)

        outcome = run(make_event(project_dir, "b.py"), store, dispatcher)

        assert outcome.status == IN_PROGRESS
        assert outcome.edit_count == 6
        assert dispatcher.requests == []

    def test_stale_guard_is_recovered(self, project_dir, store, dispatcher):
        self._seed(store, NOW - STALE_GUARD_MS - 1)

        outcome = run(make_event(project_dir, "b.py"), store, dispatcher)

        assert outcome.status == DISPATCHED
        assert dispatcher.requests[0].files == ("a.py", "b.py")


class TestRobustness:
    def test_corrupt_state_treated_as_zero(self, project_dir, store):
        path = store.path_for("checktests", "sess-1")
        path.parent.mkdir(parents=True)
        path.write_text("{definitely not json")

        outcome = run(make_event(project_dir), store, RecordingDispatcher())

        assert outcome.status == ACCUMULATED
        assert outcome.edit_count == 1

    def test_unwritable_store_does_not_raise(self, project_dir, dispatcher):
        class ReadOnlyStore(StateStore):
            def load(self, kind_name, session_id):
                return SessionState(session_id=session_id, edit_count=2, edited_files=["x.py"])

            def save(self, kind_name, session_id, state):
                raise PermissionError("read-only file system")

        outcome = run(make_event(project_dir, "y.py"), ReadOnlyStore(), dispatcher)

        assert outcome.status == DISPATCHED
        assert dispatcher.requests[0].files == ("x.py", "y.py")

    @pytest.mark.parametrize("bad_path", ["src/$(id).py", "a`b`.py", 'q";|.py'])
    def test_hostile_file_name_still_counted(self, project_dir, store, dispatcher, bad_path):
        outcome = run(make_event(project_dir, bad_path), store, dispatcher)

        assert outcome.status == ACCUMULATED
        assert store.load("checktests", "sess-1").edited_files == [bad_path]
