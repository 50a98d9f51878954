# ussdkit/core/navigation/locks.py
"""
SessionLockRegistry: session_id 단위 상호 배제.

같은 session_id의 스텝은 엄격히 순차 실행되어야 한다. 뒤 요청은 앞 요청의 모든 변경을 본다.
서로 다른 session_id는 서로를 막지 않는다. 레지스트리 잠금은 잠금 객체를 꺼내는 동안만 잡는다.

    with locks.hold(session_id):
        ...  # 이 블록 안에서는 같은 session_id의 다른 스텝이 실행되지 않는다

아무도 잡고 있지 않거나 기다리지 않는 잠금은 참조 카운트가 0이 되는 순간 제거된다.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List


class _Entry:
    __slots__ = ("lock", "refs")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.refs = 0


class SessionLockRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[str, _Entry] = {}

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:
        entry = self._acquire_entry(session_id)
        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            self._release_entry(session_id, entry)

    def active_ids(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def _acquire_entry(self, session_id: str) -> _Entry:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                entry = _Entry()
                self._entries[session_id] = entry
            entry.refs += 1
            return entry

    def _release_entry(self, session_id: str, entry: _Entry) -> None:
        with self._lock:
            entry.refs -= 1
            if entry.refs == 0 and self._entries.get(session_id) is entry:
                del self._entries[session_id]
