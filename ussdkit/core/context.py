# ussdkit/core/context.py
"""
ActionContext: 액션 핸들러 한 번 호출에 필요한 모든 데이터를 담는 컨테이너.

─── 설계 원칙 ────────────────────────────────────────────────────────────────
  - 비즈니스 로직 없음. 데이터 컨테이너 + 얇은 헬퍼만 둔다.
  - 핸들러는 ActionContext를 통해서만 세션 scratch 공간에 접근한다.
  - state는 이 스텝의 작업 사본이다. 핸들러가 실패·타임아웃되면 사본은 버려지고
    저장된 세션은 바뀌지 않는다.

─── 데이터 흐름 ─────────────────────────────────────────────────────────────
  NavigationEngine
      ↓ working = sessions.get(session_id).model_copy(deep=True)
      ↓ ActionContext(session_id, caller_id, input, raw_input, node, option, state=working)
  ActionDispatcher.invoke(handler, ctx)
      ↓ handler.handle(ctx) → StepResult
  NavigationEngine
      ↓ StepResult 적용 → sessions.save(working)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TypeVar

from ussdkit.core.actions.step_result import StepResult
from ussdkit.core.menu.models import MenuNode, MenuOption
from ussdkit.core.state.session import SessionKey, SessionState

T = TypeVar("T")


@dataclass
class ActionContext:
    """
    Attributes:
        session_id: 세션 식별자
        caller_id:  발신자 식별자
        input:      유효 입력. 와일드카드면 사용자가 입력한 원문, 일반 옵션이면 옵션의 value
        raw_input:  이번 요청의 입력 원문 (trim 전)
        node:       옵션이 매칭된 노드
        option:     매칭된 옵션
        state:      이번 스텝의 SessionState 작업 사본
        metadata:   핸들러 간 임시 데이터 전달용 dict (저장되지 않음)
    """

    session_id: str
    caller_id:  str
    input:      str
    raw_input:  str
    node:       MenuNode
    option:     MenuOption
    state:      SessionState
    metadata:   Dict[str, Any] = field(default_factory=dict)

    @property
    def is_free_text(self) -> bool:
        return self.option.is_wildcard

    # ── scratch ───────────────────────────────────────────────────────────

    def get(self, key: SessionKey[T], default: Optional[T] = None) -> Optional[T]:
        return self.state.get(key, default)

    def set(self, key: SessionKey[T], value: T) -> None:
        self.state.set(key, value)

    def remove(self, key: SessionKey[Any]) -> None:
        self.state.remove(key)

    # ── StepResult 생성 ───────────────────────────────────────────────────

    def continue_(self, prompt: str) -> StepResult:
        return StepResult.continue_(prompt)

    def end(self, message: Optional[str] = None) -> StepResult:
        return StepResult.end(message)

    def go_to(self, node_id: str) -> StepResult:
        return StepResult.go_to(node_id)

    def go_home(self) -> StepResult:
        return StepResult.go_home()
