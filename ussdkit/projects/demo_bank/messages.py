# ussdkit/projects/demo_bank/messages.py
"""
데모 뱅크 사용자 메시지 상수.

서비스 문구 변경은 이 파일만 수정하면 된다.
handlers.py 로직은 건드리지 않아도 됨.
"""

from decimal import Decimal

# ── 잔액 조회 ─────────────────────────────────────────────────────────────────

BALANCE_MESSAGE = "Your balance is GHS {balance:,.2f}"

# ── 이체 ──────────────────────────────────────────────────────────────────────

ENTER_AMOUNT_PROMPT = "Enter amount to transfer:"
INVALID_AMOUNT_PROMPT = "Invalid amount. Please enter a valid amount:"


def transfer_confirm_prompt(recipient: str, amount: Decimal) -> str:
    return (
        "Confirm transfer:\n"
        f"To: {recipient}\n"
        f"Amount: GHS {amount:.2f}\n"
        "1. Confirm\n"
        "2. Cancel"
    )


def transfer_success(recipient: str, amount: Decimal) -> str:
    return f"Transfer of GHS {amount:.2f} to {recipient} successful!\nThank you."


# ── 투표 / 상품 ───────────────────────────────────────────────────────────────

def vote_recorded(candidate: str) -> str:
    return f"Thank you for voting for Candidate {candidate}!"


def product_selected(label: str) -> str:
    return f"You selected {label}.\nWe will send details by SMS."
