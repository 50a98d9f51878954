# ussdkit/projects/demo_bank/tests/test_concurrency.py
"""같은 session_id 요청의 직렬화와 서로 다른 세션의 병행 처리."""

import threading
import time

from ussdkit.core.actions import StepResult
from ussdkit.core.navigation import SessionLockRegistry
from ussdkit.projects.demo_bank.tests.fakes import BlockingHandler, RecordingHandler, make_engine, request


class SlowJumpHandler:
    def __init__(self):
        self.started = threading.Event()

    def handle(self, ctx):
        self.started.set()
        time.sleep(0.3)
        return ctx.go_to("Info")


def test_same_session_requests_are_sequential():
    jump = SlowJumpHandler()
    balance = RecordingHandler(StepResult.end("balance"))
    engine = make_engine(handlers={"Jump": jump, "Balance": balance})
    engine.handle(request("s1", new=True))

    responses = {}

    def send(name, raw):
        responses[name] = engine.handle(request("s1", raw))

    first = threading.Thread(target=send, args=("first", "5"))
    second = threading.Thread(target=send, args=("second", "1"))
    first.start()
    assert jump.started.wait(2)
    second.start()
    first.join(5)
    second.join(5)

    assert responses["first"].message == "Info\n1. About"
    # 두 번째 요청은 첫 번째 요청의 이동 결과(Info)에서 처리된다
    assert responses["second"].message == "Bye"
    assert balance.calls == []


def test_different_sessions_do_not_block_each_other():
    blocking = BlockingHandler()
    engine = make_engine(handlers={"Balance": blocking})
    engine.handle(request("s1", new=True))

    worker = threading.Thread(target=engine.handle, args=(request("s1", "1"),))
    worker.start()
    try:
        assert blocking.started.wait(2)
        resp = engine.handle(request("s2", new=True))
        assert resp.continue_session
        assert resp.message.startswith("Welcome")
    finally:
        blocking.release.set()
        worker.join(5)


def test_lock_registry_drops_idle_entries():
    locks = SessionLockRegistry()
    with locks.hold("a"):
        with locks.hold("b"):
            assert sorted(locks.active_ids()) == ["a", "b"]
    assert locks.active_ids() == []


def test_timed_out_handlers_do_not_starve_other_sessions():
    blocking = BlockingHandler()
    engine = make_engine(
        handlers={"Balance": blocking, "Jump": lambda ctx: ctx.go_to("Info")},
        handler_timeout_sec=0.2,
    )
    try:
        for sid in ("a1", "a2", "a3"):
            engine.handle(request(sid, new=True))
            assert engine.handle(request(sid, "1")).message == engine.options.error_message

        engine.handle(request("b", new=True))
        resp = engine.handle(request("b", "5"))
        assert resp.message == "Info\n1. About"
        assert resp.continue_session
    finally:
        blocking.release.set()
