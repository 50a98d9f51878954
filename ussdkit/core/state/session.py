# ussdkit/core/state/session.py
"""
세션 State 모델.

─── 필드 설명 ───────────────────────────────────────────────────────────────
  session_id       게이트웨이가 부여한 세션 식별자
  caller_id        발신자 식별자 (MSISDN 등). 세션 이어하기 검색 키
  menu_id          이 세션이 사용하는 MenuGraph.id
  current_node_id  현재 노드. 세션은 항상 정확히 하나의 노드에 있다
  nav_stack        back 명령용 이동 이력 (마지막 요소가 직전 노드)
  scratch          스텝 간 데이터 공유 공간. SessionKey로만 읽고 쓴다
  page_index       페이지네이션 노드별 현재 페이지 (0부터)
  resume_from      이어하기 선택 대기 중일 때, 이어갈 이전 세션 id
  ended            종료 여부. True 이후의 요청은 만료 메시지로 거절된다

State 객체는 NavigationEngine이 요청마다 deep copy 한 뒤 수정하고,
스텝이 끝날 때 한 번만 SessionStore.save()로 커밋한다.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionKey(Generic[T]):
    """
    scratch 공간의 타입 지정 키.

        RECIPIENT = SessionKey("recipient", str)
        AMOUNT    = SessionKey("amount", Decimal)

        state.set(AMOUNT, Decimal("50"))   # OK
        state.set(AMOUNT, "50")            # TypeError
        amount = state.get(AMOUNT)         # Optional[Decimal]
    """

    name: str
    type: Type[T]


class SessionState(BaseModel):
    session_id:      str
    caller_id:       str = ""
    menu_id:         str = ""
    current_node_id: str
    nav_stack:       List[str] = Field(default_factory=list)
    scratch:         Dict[str, Any] = Field(default_factory=dict)
    page_index:      Dict[str, int] = Field(default_factory=dict)
    resume_from:     Optional[str] = None
    created_at:      datetime = Field(default_factory=utcnow)
    updated_at:      datetime = Field(default_factory=utcnow)
    ended:           bool = False

    # ── scratch ───────────────────────────────────────────────────────────

    def get(self, key: SessionKey[T], default: Optional[T] = None) -> Optional[T]:
        value = self.scratch.get(key.name)
        if value is None:
            return default
        if not isinstance(value, key.type):
            raise TypeError(
                f"scratch['{key.name}'] holds {type(value).__name__}, expected {key.type.__name__}"
            )
        return value

    def set(self, key: SessionKey[T], value: T) -> None:
        if not isinstance(value, key.type):
            raise TypeError(
                f"scratch['{key.name}'] expects {key.type.__name__}, got {type(value).__name__}"
            )
        self.scratch[key.name] = value

    def remove(self, key: SessionKey[Any]) -> None:
        self.scratch.pop(key.name, None)

    # ── 수명 ──────────────────────────────────────────────────────────────

    def touch(self) -> None:
        self.updated_at = utcnow()

    def is_expired(self, timeout_sec: float, now: Optional[datetime] = None) -> bool:
        if timeout_sec <= 0:
            return False
        now = now or utcnow()
        return now - self.updated_at > timedelta(seconds=timeout_sec)

    def is_active(self, timeout_sec: float, now: Optional[datetime] = None) -> bool:
        return not self.ended and not self.is_expired(timeout_sec, now)
