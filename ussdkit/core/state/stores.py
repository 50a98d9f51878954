# ussdkit/core/state/stores.py
"""
세션 스토어.

프로덕션 환경에서는 Redis·RDB 기반 구현으로 교체 가능.
NavigationEngine이 기대하는 인터페이스 (BaseSessionStore):
  - get(session_id) → SessionState | None
  - save(state)                        session_id 단위로 원자적
  - remove(session_id)
  - find_active_by_caller(caller_id) → SessionState | None   세션 이어하기용

같은 session_id에 대한 스텝 직렬화는 엔진의 SessionLockRegistry가 담당한다.
스토어는 개별 호출의 원자성만 보장하면 된다.
"""

import threading
from datetime import datetime
from typing import Dict, Optional, Set

from ussdkit.core.state.session import SessionState, utcnow


class BaseSessionStore:
    """세션 영속화 계약. 구현체는 get/save가 서로 다른 객체를 주고받도록(복사) 해야 한다."""

    def get(self, session_id: str) -> Optional[SessionState]:
        raise NotImplementedError

    def save(self, state: SessionState) -> None:
        raise NotImplementedError

    def remove(self, session_id: str) -> None:
        raise NotImplementedError

    def find_active_by_caller(self, caller_id: str) -> Optional[SessionState]:
        raise NotImplementedError


class InMemorySessionStore(BaseSessionStore):
    """
    프로세스 로컬 인메모리 세션 저장소.

    - 저장·조회 시 deep copy 를 주고받는다. 엔진이 작업 사본을 수정하는 동안 저장본은 그대로다.
    - session_timeout_sec: 마지막 활동(updated_at) 이후 만료까지의 시간. find_active_by_caller,
      purge_expired 가 사용한다.

    사용법 (manifest.py):
        "sessions_factory": lambda: InMemorySessionStore(session_timeout_sec=300),
    """

    def __init__(self, session_timeout_sec: float = 300):
        self.session_timeout_sec = session_timeout_sec
        self._lock = threading.Lock()
        self._store: Dict[str, SessionState] = {}
        # caller_id -> {session_id, ...}
        self._by_caller: Dict[str, Set[str]] = {}

    def get(self, session_id: str) -> Optional[SessionState]:
        with self._lock:
            state = self._store.get(session_id)
            return state.model_copy(deep=True) if state is not None else None

    def save(self, state: SessionState) -> None:
        snapshot = state.model_copy(deep=True)
        with self._lock:
            self._store[state.session_id] = snapshot
            if state.caller_id:
                self._by_caller.setdefault(state.caller_id, set()).add(state.session_id)

    def remove(self, session_id: str) -> None:
        with self._lock:
            self._remove_unlocked(session_id)

    def find_active_by_caller(self, caller_id: str) -> Optional[SessionState]:
        """발신자의 종료·만료되지 않은 세션 중 가장 최근에 활동한 것."""
        if not caller_id:
            return None
        now = utcnow()
        with self._lock:
            candidates = [
                self._store[sid]
                for sid in self._by_caller.get(caller_id, set())
                if sid in self._store
                and self._store[sid].is_active(self.session_timeout_sec, now)
                and self._store[sid].resume_from is None
            ]
            if not candidates:
                return None
            latest = max(candidates, key=lambda s: s.updated_at)
            return latest.model_copy(deep=True)

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        """
        종료됐거나 만료된 세션을 삭제한다. 주기 작업에서 호출.

        Returns:
            삭제한 세션 수
        """
        now = now or utcnow()
        with self._lock:
            stale = [
                sid for sid, state in self._store.items()
                if not state.is_active(self.session_timeout_sec, now)
            ]
            for sid in stale:
                self._remove_unlocked(sid)
        return len(stale)

    def _remove_unlocked(self, session_id: str) -> None:
        state = self._store.pop(session_id, None)
        if state is None:
            return
        sids = self._by_caller.get(state.caller_id)
        if sids is not None:
            sids.discard(session_id)
            if not sids:
                del self._by_caller[state.caller_id]
