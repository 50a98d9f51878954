# ussdkit/core/actions/dispatcher.py
"""
액션 실행의 단일 진입점.

ActionDispatcher는 action_key → 핸들러 레지스트리와 실행 정책(타임아웃)을 함께 가진다.
NavigationEngine은 핸들러를 직접 호출하지 않고 항상 Dispatcher를 통한다.

─── 등록 ───────────────────────────────────────────────────────────────────
  명시적 등록만 지원한다 (모듈 스캔 없음).

    dispatcher = ActionDispatcher()
    dispatcher.register("BalanceCheck", BalanceCheckHandler)    # 클래스 → 첫 resolve 때 생성
    dispatcher.register("Vote", VotingHandler())                # 인스턴스
    dispatcher.register("Echo", lambda ctx: ctx.end(ctx.input))  # 함수

    @dispatcher.action()              # 키 생략 시 클래스명에서 "Handler"를 뗀 이름 ("Transfer")
    class TransferHandler(BaseActionHandler): ...

─── 오류 분류 ──────────────────────────────────────────────────────────────
  ActionNotFound  — 등록되지 않은 action_key. 메뉴 구성 결함이므로 재시도하지 않는다.
  HandlerFailure  — 핸들러가 예외를 던졌거나 StepResult가 아닌 값을 반환.
  HandlerTimeout  — 핸들러 시작 후 timeout_sec 안에 끝나지 않음. 실행 중인 스레드는 버려진다.
  엔진은 셋 모두를 일반 종료(End) 응답으로 바꾸고, 원인은 로그에만 남긴다.
"""

import inspect
import itertools
import threading
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Set

from ussdkit.core.actions.step_result import StepResult
from ussdkit.core.config import settings
from ussdkit.core.logging import setup_logger

if TYPE_CHECKING:
    from ussdkit.core.context import ActionContext

Handler = Callable[["ActionContext"], StepResult]


class ActionNotFound(LookupError):
    """action_key에 해당하는 핸들러가 레지스트리에 없음."""


class HandlerFailure(Exception):
    """핸들러 실행 실패. 원인 예외는 __cause__ 에 있다."""


class HandlerTimeout(HandlerFailure):
    """핸들러가 제한 시간 안에 StepResult를 반환하지 못함."""


def default_action_key(obj: Any) -> str:
    """TransferHandler → "Transfer", check_balance → "check_balance"."""
    name = getattr(obj, "__name__", type(obj).__name__)
    if name.endswith("Handler") and len(name) > len("Handler"):
        return name[: -len("Handler")]
    return name


class ActionDispatcher:
    """
    action_key → 핸들러 레지스트리 + 실행 정책.

    Attributes:
        timeout_sec:  핸들러 1회 실행 제한 시간(초). 0 또는 None이면 호출 스레드에서 바로 실행.
        _entries:     key → 등록된 객체 (클래스 / 인스턴스 / 함수)
        _resolved:    key → 호출 가능한 핸들러 (클래스는 한 번만 생성해 캐시)
    """

    def __init__(
        self,
        handlers: Optional[Dict[str, Any]] = None,
        timeout_sec: Optional[float] = None,
    ):
        self.timeout_sec = settings.USSD_HANDLER_TIMEOUT_SEC if timeout_sec is None else timeout_sec
        self._entries: Dict[str, Any] = {}
        self._resolved: Dict[str, Handler] = {}
        self._lock = threading.Lock()
        # 실행 중인 핸들러 스레드. 타임아웃으로 버려진 스레드도 끝날 때까지 여기 남는다
        self._running: Set[threading.Thread] = set()
        self._seq = itertools.count(1)
        self._closed = False
        self.logger = setup_logger("ActionDispatcher")

        for key, handler in (handlers or {}).items():
            self.register(key, handler)

    # ── 등록 ──────────────────────────────────────────────────────────────

    def register(self, key: str, handler: Any) -> Any:
        if not key:
            raise ValueError("action key must be a non-empty string")
        if not (inspect.isclass(handler) or callable(handler) or hasattr(handler, "handle")):
            raise TypeError(f"Handler for '{key}' must be a class, a callable or expose handle(ctx).")
        with self._lock:
            if key in self._entries:
                self.logger.warning(f"action '{key}' re-registered; previous handler replaced")
            self._entries[key] = handler
            self._resolved.pop(key, None)
        return handler

    def action(self, key: Optional[str] = None) -> Callable[[Any], Any]:
        """@dispatcher.action() 데코레이터. 등록한 객체를 그대로 돌려준다."""
        def wrapper(handler: Any) -> Any:
            return self.register(key or default_action_key(handler), handler)
        return wrapper

    def has_action(self, key: str) -> bool:
        return key in self._entries

    @property
    def keys(self) -> list:
        return sorted(self._entries)

    # ── 조회 ──────────────────────────────────────────────────────────────

    def resolve(self, key: str) -> Handler:
        """
        Raises:
            ActionNotFound: 등록되지 않은 key
        """
        with self._lock:
            resolved = self._resolved.get(key)
            if resolved is not None:
                return resolved

            entry = self._entries.get(key)
            if entry is None:
                raise ActionNotFound(f"No handler registered for action '{key}'")

            # 클래스는 팩토리로 취급: 최초 resolve 시 한 번만 생성
            target = entry() if inspect.isclass(entry) else entry
            resolved = target.handle if hasattr(target, "handle") else target
            self._resolved[key] = resolved
            return resolved

    # ── 실행 ──────────────────────────────────────────────────────────────

    def invoke(self, handler: Handler, ctx: "ActionContext", timeout_sec: Optional[float] = None) -> StepResult:
        """
        핸들러를 실행하고 StepResult를 반환한다.

        Raises:
            HandlerTimeout: 제한 시간 초과
            HandlerFailure: 핸들러 예외 또는 잘못된 반환값
        """
        timeout = self.timeout_sec if timeout_sec is None else timeout_sec

        if not timeout or timeout <= 0:
            return _call(handler, ctx)

        # 호출마다 전용 daemon 스레드. 타임아웃된 핸들러가 다른 세션의 실행 슬롯을 붙잡지 않는다.
        call = _PendingCall(handler, ctx)
        thread = threading.Thread(
            target=self._run, args=(call,), name=f"ussd-action-{next(self._seq)}", daemon=True,
        )
        with self._lock:
            if self._closed:
                raise RuntimeError("dispatcher has been shut down")
            self._running.add(thread)
        thread.start()

        # 제한 시간은 핸들러가 실제로 시작된 시점부터 잰다
        call.started.wait()
        if not call.done.wait(timeout):
            self.logger.warning(f"abandoning handler thread {thread.name} after {timeout}s")
            raise HandlerTimeout(f"handler exceeded {timeout}s")
        if call.error is not None:
            raise call.error
        return call.result

    @property
    def running_count(self) -> int:
        """아직 끝나지 않은 핸들러 스레드 수 (타임아웃으로 버려진 것 포함)."""
        with self._lock:
            return len(self._running)

    def shutdown(self, wait: bool = False) -> None:
        """새 호출을 막는다. wait=True 이면 실행 중인 핸들러가 끝날 때까지 기다린다."""
        with self._lock:
            self._closed = True
            running = list(self._running)
        if wait:
            for thread in running:
                thread.join()

    def _run(self, call: "_PendingCall") -> None:
        try:
            call.run()
        finally:
            with self._lock:
                self._running.discard(threading.current_thread())


class _PendingCall:
    """스레드 하나에서 실행되는 핸들러 호출 1건. 결과 또는 HandlerFailure를 담는다."""

    def __init__(self, handler: Handler, ctx: "ActionContext"):
        self.handler = handler
        self.ctx = ctx
        self.started = threading.Event()
        self.done = threading.Event()
        self.result: Optional[StepResult] = None
        self.error: Optional[HandlerFailure] = None

    def run(self) -> None:
        self.started.set()
        try:
            self.result = _call(self.handler, self.ctx)
        except HandlerFailure as e:
            self.error = e
        finally:
            self.done.set()



def _call(handler: Handler, ctx: "ActionContext") -> StepResult:
    try:
        result = handler(ctx)
    except Exception as e:
        raise HandlerFailure(f"{type(e).__name__}: {e}") from e
    if not isinstance(result, StepResult):
        raise HandlerFailure(f"handler returned {type(result).__name__}, expected StepResult")
    return result
