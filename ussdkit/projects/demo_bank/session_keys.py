# ussdkit/projects/demo_bank/session_keys.py
"""데모 뱅크 핸들러가 세션 scratch 공간에 쓰는 타입 지정 키."""

from decimal import Decimal

from ussdkit.core.state.session import SessionKey

# 이체 플로우 진행 단계: 1=수신자 입력 완료, 2=금액 입력 완료(확인 대기)
TRANSFER_STEP = SessionKey("transfer_step", int)
RECIPIENT     = SessionKey("recipient", str)
AMOUNT        = SessionKey("amount", Decimal)

LAST_VOTE     = SessionKey("last_vote", str)
