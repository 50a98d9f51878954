# ussdkit/projects/demo_bank/tests/test_engine.py
"""NavigationEngine 단일 스텝 동작 테스트 (가짜 핸들러 사용)."""

from datetime import timedelta

import pytest

from ussdkit.core.actions import StepResult
from ussdkit.core.menu import MenuBuilder
from ussdkit.core.navigation import RESUME_NODE_ID
from ussdkit.core.state import InMemorySessionStore
from ussdkit.projects.demo_bank.tests.fakes import (
    RECIPIENT_KEY,
    BlockingHandler,
    RecipientHandler,
    RecordingHandler,
    make_engine,
    request,
)

ROOT = "Welcome\n1. Balance\n2. Transfer\n3. Products\n4. Info\n5. Jump"


@pytest.fixture
def balance():
    return RecordingHandler(StepResult.end("Your balance is GHS 100"))


@pytest.fixture
def engine(balance):
    return make_engine(handlers={
        "Balance": balance,
        "Recipient": RecipientHandler(),
        "Jump": lambda ctx: ctx.go_to("Info"),
    })


def _start(engine, session_id="s1", **kwargs):
    return engine.handle(request(session_id, "*123#", new=True, **kwargs))


# ── 시작 ─────────────────────────────────────────────────────────────────────

def test_new_session_renders_root(engine):
    resp = _start(engine)
    assert resp.message == ROOT
    assert resp.continue_session

    state = engine.sessions.get("s1")
    assert state.current_node_id == "Main"
    assert state.nav_stack == []
    assert state.menu_id == "test_menu"


def test_unknown_session_on_continuation_is_rejected(engine):
    resp = engine.handle(request("ghost", "1"))
    assert resp.message == engine.options.session_expired_message
    assert not resp.continue_session
    assert engine.sessions.get("ghost") is None


# ── 시나리오 ─────────────────────────────────────────────────────────────────

def test_scenario_a_action_ends_session(engine, balance):
    _start(engine)
    resp = engine.handle(request("s1", "1"))

    assert resp.message == "Your balance is GHS 100"
    assert not resp.continue_session
    assert len(balance.calls) == 1
    assert balance.calls[0].input == "1"
    assert engine.sessions.get("s1").ended


def test_scenario_b_wildcard_stores_input_and_continues(engine):
    _start(engine)
    assert engine.handle(request("s1", "2")).message == "Enter recipient:"

    resp = engine.handle(request("s1", "0551234567"))
    assert resp.message == "Enter amount"
    assert resp.continue_session

    state = engine.sessions.get("s1")
    assert state.current_node_id == "Transfer"
    assert state.get(RECIPIENT_KEY) == "0551234567"


def test_ended_session_rejects_further_input(engine, balance):
    _start(engine)
    engine.handle(request("s1", "1"))

    resp = engine.handle(request("s1", "1"))
    assert resp.message == engine.options.session_expired_message
    assert not resp.continue_session
    assert len(balance.calls) == 1


def test_timed_out_session_is_expired():
    engine = make_engine(session_timeout_sec=60)
    _start(engine)
    state = engine.sessions.get("s1")
    state.updated_at -= timedelta(seconds=120)
    engine.sessions.save(state)

    resp = engine.handle(request("s1", "2"))
    assert resp.message == engine.options.session_expired_message
    assert engine.sessions.get("s1").ended


# ── back / home / invalid ───────────────────────────────────────────────────

def test_back_at_root_is_idempotent(engine):
    _start(engine)
    for _ in range(3):
        resp = engine.handle(request("s1", "0"))
        assert resp.message == ROOT
        assert resp.continue_session
    state = engine.sessions.get("s1")
    assert state.current_node_id == "Main"
    assert state.nav_stack == []


def test_goto_then_back_returns_to_origin(engine):
    _start(engine)
    resp = engine.handle(request("s1", "5"))
    assert resp.message == "Info\n1. About"
    assert engine.sessions.get("s1").nav_stack == ["Main"]

    assert engine.handle(request("s1", "0")).message == ROOT
    assert engine.sessions.get("s1").nav_stack == []


def test_home_clears_history(engine):
    _start(engine)
    engine.handle(request("s1", "4"))
    engine.handle(request("s1", "#"))

    state = engine.sessions.get("s1")
    assert state.current_node_id == "Main"
    assert state.nav_stack == []


def test_invalid_input_leaves_state_untouched(engine):
    _start(engine)
    engine.handle(request("s1", "4"))
    before = engine.sessions.get("s1")

    resp = engine.handle(request("s1", "9"))
    assert resp.message == engine.options.invalid_input_message + "\nInfo\n1. About"
    assert resp.continue_session
    assert engine.sessions.get("s1") == before


def test_terminal_node_ends_session(engine):
    _start(engine)
    engine.handle(request("s1", "4"))

    resp = engine.handle(request("s1", "1"))
    assert resp.message == "Bye"
    assert not resp.continue_session
    assert engine.sessions.get("s1").ended


# ── 핸들러 오류 ─────────────────────────────────────────────────────────────

def test_missing_handler_ends_with_generic_message():
    engine = make_engine(handlers={})
    _start(engine)

    resp = engine.handle(request("s1", "1"))
    assert resp.message == engine.options.missing_handler_message
    assert not resp.continue_session
    assert engine.sessions.get("s1").ended


def test_handler_failure_discards_step_changes():
    def explode(ctx):
        ctx.set(RECIPIENT_KEY, ctx.input)
        raise RuntimeError("core banking unavailable")

    engine = make_engine(handlers={"Recipient": explode})
    _start(engine)
    engine.handle(request("s1", "2"))

    resp = engine.handle(request("s1", "0551234567"))
    assert resp.message == engine.options.error_message
    assert "core banking" not in resp.message
    assert not resp.continue_session

    state = engine.sessions.get("s1")
    assert state.ended
    assert state.current_node_id == "Transfer"
    assert state.get(RECIPIENT_KEY) is None


def test_handler_returning_wrong_type_is_a_failure():
    engine = make_engine(handlers={"Balance": lambda ctx: "not a result"})
    _start(engine)
    assert engine.handle(request("s1", "1")).message == engine.options.error_message


def test_handler_timeout_ends_session():
    blocking = BlockingHandler()
    engine = make_engine(handlers={"Balance": blocking}, handler_timeout_sec=0.2)
    _start(engine)

    try:
        resp = engine.handle(request("s1", "1"))
    finally:
        blocking.release.set()

    assert resp.message == engine.options.error_message
    assert not resp.continue_session
    assert engine.sessions.get("s1").ended


def test_goto_unknown_node_is_a_failure():
    engine = make_engine(handlers={"Jump": lambda ctx: ctx.go_to("Nowhere")})
    _start(engine)
    resp = engine.handle(request("s1", "5"))
    assert resp.message == engine.options.error_message
    assert engine.sessions.get("s1").current_node_id == "Main"


def test_unexpected_store_error_becomes_error_response():
    class BrokenStore(InMemorySessionStore):
        def get(self, session_id):
            raise RuntimeError("store down")

    engine = make_engine(store=BrokenStore())
    resp = engine.handle(request("s1", "1"))
    assert resp.message == engine.options.error_message
    assert not resp.continue_session


# ── action + target_step ────────────────────────────────────────────────────

def _forced_graph():
    return (
        MenuBuilder("forced")
        .root("A")
        .node("A", lambda n: n
              .message("A")
              .option("1", "Track", action="Track", goto="B")
              .option("2", "Stop", action="Stop", goto="B"))
        .node("B", lambda n: n.message("B").option("1", "Again", goto="A"))
        .build()
    )


@pytest.mark.parametrize("result", [
    StepResult.continue_("ignored"),
    StepResult.go_to("A"),
    StepResult.go_home(),
])
def test_target_step_overrides_non_end_results(result):
    engine = make_engine(_forced_graph(), handlers={"Track": RecordingHandler(result)})
    engine.handle(request("s1", new=True))

    resp = engine.handle(request("s1", "1"))
    assert resp.message == "B\n1. Again"
    assert engine.sessions.get("s1").current_node_id == "B"


def test_target_step_does_not_override_end():
    engine = make_engine(_forced_graph(), handlers={"Stop": RecordingHandler(StepResult.end("bye"))})
    engine.handle(request("s1", new=True))

    resp = engine.handle(request("s1", "2"))
    assert resp.message == "bye"
    assert not resp.continue_session


def test_end_without_message_uses_default():
    engine = make_engine(handlers={"Balance": RecordingHandler(StepResult.end())})
    _start(engine)
    assert engine.handle(request("s1", "1")).message == engine.options.default_end_message


# ── after_turn ──────────────────────────────────────────────────────────────

def test_after_turn_hook_sees_every_response():
    seen = []
    engine = make_engine(after_turn=lambda req, resp: seen.append((req.raw_input, resp.continue_session)))
    _start(engine)
    engine.handle(request("s1", "4"))
    assert seen == [("*123#", True), ("4", True)]


def test_after_turn_hook_error_does_not_change_response():
    def broken(req, resp):
        raise ValueError("audit sink down")

    engine = make_engine(after_turn=broken)
    assert _start(engine).message == ROOT


# ── 세션 이어하기 ───────────────────────────────────────────────────────────

@pytest.fixture
def resumable(balance):
    engine = make_engine(
        handlers={"Balance": balance, "Recipient": RecipientHandler()},
        enable_session_resumption=True,
    )
    _start(engine, "old")
    engine.handle(request("old", "2"))
    engine.handle(request("old", "0551234567"))
    return engine


def _resume_prompt(engine):
    o = engine.options
    return f"{o.resume_prompt}\n{o.resume_command}. {o.resume_label}\n{o.start_fresh_command}. {o.start_fresh_label}"


def test_resumption_is_offered_for_active_session(resumable):
    resp = _start(resumable, "new")
    assert resp.message == _resume_prompt(resumable)
    assert resp.continue_session
    assert resumable.sessions.get("new").current_node_id == RESUME_NODE_ID


def test_resume_restores_previous_position(resumable):
    _start(resumable, "new")
    resp = resumable.handle(request("new", "1"))
    assert resp.message == "Enter recipient:"

    state = resumable.sessions.get("new")
    assert state.current_node_id == "Transfer"
    assert state.nav_stack == ["Main"]
    assert state.get(RECIPIENT_KEY) == "0551234567"
    assert state.resume_from is None
    assert resumable.sessions.get("old").ended

    assert resumable.handle(request("new", "0")).message == ROOT


def test_start_fresh_goes_to_root(resumable):
    _start(resumable, "new")
    assert resumable.handle(request("new", "2")).message == ROOT
    assert resumable.sessions.get("new").scratch == {}
    assert resumable.sessions.get("old").ended


def test_invalid_resume_choice_reprompts(resumable):
    _start(resumable, "new")
    resp = resumable.handle(request("new", "7"))
    assert resp.message == resumable.options.invalid_input_message + "\n" + _resume_prompt(resumable)
    assert resumable.sessions.get("new").current_node_id == RESUME_NODE_ID


def test_other_caller_is_not_offered_resumption(resumable):
    assert _start(resumable, "new", caller="233200000999").message == ROOT


def test_ended_session_is_not_offered_for_resumption(resumable, balance):
    resumable.handle(request("old", "#"))
    resumable.handle(request("old", "1"))
    assert resumable.sessions.get("old").ended
    assert _start(resumable, "new").message == ROOT
