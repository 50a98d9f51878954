# ussdkit/core/actions/base_handler.py
"""
액션 핸들러 베이스.

새 핸들러는 BaseActionHandler를 상속해 handle()을 구현한다.

    class BalanceCheckHandler(BaseActionHandler):
        def handle(self, ctx):
            return self.end("Your balance is GHS 1,250.00")

handle()은 반드시 StepResult를 반환해야 한다. 예외를 던지거나 다른 값을 반환하면
엔진이 일반 오류 메시지로 세션을 종료한다 (원인은 로그에만 남는다).

함수 하나로 충분하면 클래스 없이 (ctx) → StepResult 함수를 레지스트리에 등록해도 된다.
"""

from typing import TYPE_CHECKING, Any, Optional, TypeVar

from ussdkit.core.actions.step_result import StepResult
from ussdkit.core.state.session import SessionKey

if TYPE_CHECKING:
    from ussdkit.core.context import ActionContext

T = TypeVar("T")


class BaseActionHandler:
    """핸들러 공통 헬퍼. 상태는 인스턴스가 아니라 세션 scratch 공간에 둔다 (인스턴스는 공유된다)."""

    def handle(self, ctx: "ActionContext") -> StepResult:
        raise NotImplementedError

    # ── scratch 헬퍼 ──────────────────────────────────────────────────────

    @staticmethod
    def get(ctx: "ActionContext", key: SessionKey[T], default: Optional[T] = None) -> Optional[T]:
        return ctx.get(key, default)

    @staticmethod
    def set(ctx: "ActionContext", key: SessionKey[T], value: T) -> None:
        ctx.set(key, value)

    @staticmethod
    def remove(ctx: "ActionContext", *keys: SessionKey[Any]) -> None:
        for key in keys:
            ctx.remove(key)

    # ── StepResult 헬퍼 ───────────────────────────────────────────────────

    @staticmethod
    def continue_(prompt: str) -> StepResult:
        return StepResult.continue_(prompt)

    @staticmethod
    def end(message: Optional[str] = None) -> StepResult:
        return StepResult.end(message)

    @staticmethod
    def go_to(node_id: str) -> StepResult:
        return StepResult.go_to(node_id)

    @staticmethod
    def go_home() -> StepResult:
        return StepResult.go_home()
