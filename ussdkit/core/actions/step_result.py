# ussdkit/core/actions/step_result.py
"""
StepResult: 액션 핸들러가 엔진에 돌려주는 다음 동작.

핸들러만 만들고 NavigationEngine만 소비한다.

사용 예시:
    # 같은 노드에 머무르며 프롬프트만 교체 (다단계 입력)
    return StepResult.continue_("Enter amount to transfer:")

    # 세션 종료
    return StepResult.end("Transfer successful. Thank you.")

    # 다른 노드로 이동
    return StepResult.go_to("TransferConfirm")

    # 루트로
    return StepResult.go_home()
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StepKind(str, Enum):
    CONTINUE = "continue"
    END = "end"
    GOTO = "goto"
    GO_HOME = "go_home"


@dataclass(frozen=True)
class StepResult:
    kind: StepKind
    message: str | None = None
    node_id: str | None = None

    @classmethod
    def continue_(cls, prompt: str) -> StepResult:
        return cls(kind=StepKind.CONTINUE, message=prompt)

    @classmethod
    def end(cls, message: str | None = None) -> StepResult:
        """message가 비어 있으면 엔진이 기본 종료 메시지를 사용한다."""
        return cls(kind=StepKind.END, message=message)

    @classmethod
    def go_to(cls, node_id: str) -> StepResult:
        return cls(kind=StepKind.GOTO, node_id=node_id)

    @classmethod
    def go_home(cls) -> StepResult:
        return cls(kind=StepKind.GO_HOME)
