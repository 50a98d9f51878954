# ussdkit/projects/demo_bank/handlers.py
"""
데모 뱅크 액션 핸들러.

project.yaml의 actions 섹션에서 action_key → 클래스 경로로 등록된다.
핸들러 인스턴스는 모든 세션이 공유하므로, 세션별 진행 상태는 scratch 공간(session_keys)에만 둔다.
"""

from decimal import Decimal, InvalidOperation

from ussdkit.core.actions import BaseActionHandler
from ussdkit.core.logging import setup_logger
from ussdkit.projects.demo_bank import messages
from ussdkit.projects.demo_bank.session_keys import AMOUNT, LAST_VOTE, RECIPIENT, TRANSFER_STEP

logger = setup_logger("demo_bank.handlers")

DEMO_BALANCE = Decimal("1250.00")


class BalanceCheckHandler(BaseActionHandler):
    def handle(self, ctx):
        return self.end(messages.BALANCE_MESSAGE.format(balance=DEMO_BALANCE))


class TransferStartHandler(BaseActionHandler):
    """Main → TransferRecipient 진입. 이전에 중단된 이체 진행 상태를 지우고 처음부터 시작한다."""

    def handle(self, ctx):
        self.remove(ctx, TRANSFER_STEP, RECIPIENT, AMOUNT)
        return self.go_to("TransferRecipient")


class TransferHandler(BaseActionHandler):
    """
    TransferRecipient 노드의 자유 입력을 세 스텝에 걸쳐 처리한다.

      step 없음 → 입력을 수신자로 저장, 금액 요청
      step 1    → 금액 파싱 (실패 시 재요청), 확인 화면
      step 2    → "1"이면 이체 완료(End), 그 외는 취소 후 홈으로
    """

    def handle(self, ctx):
        step = self.get(ctx, TRANSFER_STEP)
        text = ctx.input.strip()

        if step is None:
            self.set(ctx, RECIPIENT, text)
            self.set(ctx, TRANSFER_STEP, 1)
            return self.continue_(messages.ENTER_AMOUNT_PROMPT)

        if step == 1:
            amount = _parse_amount(text)
            if amount is None:
                return self.continue_(messages.INVALID_AMOUNT_PROMPT)
            self.set(ctx, AMOUNT, amount)
            self.set(ctx, TRANSFER_STEP, 2)
            return self.continue_(messages.transfer_confirm_prompt(self.get(ctx, RECIPIENT), amount))

        recipient = self.get(ctx, RECIPIENT)
        amount = self.get(ctx, AMOUNT)
        self.remove(ctx, TRANSFER_STEP, RECIPIENT, AMOUNT)

        if text == "1":
            logger.info(f"[session={ctx.session_id}] transfer of {amount} to {recipient} confirmed")
            return self.end(messages.transfer_success(recipient, amount))
        return self.go_home()


class VotingHandler(BaseActionHandler):
    def handle(self, ctx):
        self.set(ctx, LAST_VOTE, ctx.input)
        return self.end(messages.vote_recorded(ctx.input))


class ProductSelectHandler(BaseActionHandler):
    def handle(self, ctx):
        return self.end(messages.product_selected(ctx.option.label))


def _parse_amount(text: str):
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount
