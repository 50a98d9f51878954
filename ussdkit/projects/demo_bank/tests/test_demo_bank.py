# ussdkit/projects/demo_bank/tests/test_demo_bank.py
"""project.yaml + handlers.py 로 조립한 데모 뱅크 엔드투엔드 플로우."""

import pytest

from ussdkit.core.navigation import NavigationEngine
from ussdkit.projects.demo_bank.manifest import load_manifest
from ussdkit.projects.demo_bank.session_keys import AMOUNT, RECIPIENT, TRANSFER_STEP
from ussdkit.projects.demo_bank.tests.fakes import request

MAIN = (
    "Welcome to Demo Bank\n"
    "1. Check Balance\n"
    "2. Transfer Money\n"
    "3. Vote\n"
    "4. View Products\n"
    "5. Exit"
)


@pytest.fixture
def engine():
    engine = NavigationEngine.from_manifest(load_manifest())
    yield engine
    engine.dispatcher.shutdown()


def _dial(engine, session_id="d1"):
    return engine.handle(request(session_id, "*713#", new=True))


def test_main_menu(engine):
    resp = _dial(engine)
    assert resp.message == MAIN
    assert resp.continue_session


def test_balance_check(engine):
    _dial(engine)
    resp = engine.handle(request("d1", "1"))
    assert resp.message == "Your balance is GHS 1,250.00"
    assert not resp.continue_session


def test_transfer_confirmed(engine):
    _dial(engine)
    assert engine.handle(request("d1", "2")).message == "Enter recipient phone number:"
    assert engine.handle(request("d1", "0551234567")).message == "Enter amount to transfer:"
    assert engine.handle(request("d1", "abc")).message == "Invalid amount. Please enter a valid amount:"
    assert engine.handle(request("d1", "-5")).message == "Invalid amount. Please enter a valid amount:"

    confirm = engine.handle(request("d1", "50"))
    assert confirm.message == (
        "Confirm transfer:\n"
        "To: 0551234567\n"
        "Amount: GHS 50.00\n"
        "1. Confirm\n"
        "2. Cancel"
    )

    done = engine.handle(request("d1", "1"))
    assert done.message == "Transfer of GHS 50.00 to 0551234567 successful!\nThank you."
    assert not done.continue_session

    state = engine.sessions.get("d1")
    assert state.ended
    for key in (TRANSFER_STEP, RECIPIENT, AMOUNT):
        assert state.get(key) is None


@pytest.mark.parametrize("leave", ["0", "#"])
def test_transfer_restarts_after_leaving_midway(engine, leave):
    _dial(engine)
    engine.handle(request("d1", "2"))
    engine.handle(request("d1", "0551234567"))

    assert engine.handle(request("d1", leave)).message == MAIN
    assert engine.handle(request("d1", "2")).message == "Enter recipient phone number:"

    resp = engine.handle(request("d1", "0241111111"))
    assert resp.message == "Enter amount to transfer:"
    assert engine.sessions.get("d1").get(RECIPIENT) == "0241111111"


def test_transfer_cancelled_returns_home(engine):
    _dial(engine)
    engine.handle(request("d1", "2"))
    engine.handle(request("d1", "0551234567"))
    engine.handle(request("d1", "20"))

    resp = engine.handle(request("d1", "2"))
    assert resp.message == MAIN
    assert resp.continue_session

    state = engine.sessions.get("d1")
    assert state.current_node_id == "Main"
    assert state.scratch == {}


def test_vote(engine):
    _dial(engine)
    assert engine.handle(request("d1", "3")).message == (
        "Vote for your candidate:\n1. Candidate A\n2. Candidate B\n3. Candidate C"
    )
    resp = engine.handle(request("d1", "2"))
    assert resp.message == "Thank you for voting for Candidate B!"
    assert not resp.continue_session


def test_products_paginate_in_threes(engine):
    _dial(engine)
    assert engine.handle(request("d1", "4")).message == (
        "Our Products:\n"
        "1. Product A - GHS 10\n"
        "2. Product B - GHS 20\n"
        "3. Product C - GHS 30\n"
        "99. Next"
    )
    engine.handle(request("d1", "99"))
    resp = engine.handle(request("d1", "2"))
    assert resp.message == "You selected Product E - GHS 50.\nWe will send details by SMS."


def test_exit_node_ends_session(engine):
    _dial(engine)
    resp = engine.handle(request("d1", "5"))
    assert resp.message == "Goodbye from Demo Bank."
    assert not resp.continue_session


def test_manifest_registers_every_menu_action(engine):
    keys = {
        opt.action_key
        for node in engine.graph.nodes.values()
        for opt in node.options
        if opt.action_key
    }
    assert keys <= set(engine.dispatcher.keys)
