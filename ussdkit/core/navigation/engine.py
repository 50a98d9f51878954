# ussdkit/core/navigation/engine.py
"""
NavigationEngine: 단일 요청(one-step) 실행 파이프라인.

─── 역할 분리 ───────────────────────────────────────────────────────────────
  NavigationEngine  → 세션 잠금·로드·매칭 결과 적용·저장·응답 렌더링
  OptionMatcher     → 원문 입력 → MatchResult
  PaginationEngine  → 페이지 계산·이동·렌더링
  ActionDispatcher  → action_key → 핸들러 조회·실행 (타임아웃 포함)
  SessionStore      → SessionState 영속화

─── 단일 스텝 실행 순서 ────────────────────────────────────────────────────
  0. session_id 잠금       SessionLockRegistry.hold() — 스텝 전체 동안 유지
  1. 세션 로드             없으면: is_new_session=False → 만료 응답
                                   이어하기 가능 → 이어하기 프롬프트
                                   그 외 → 루트에서 새로 시작 (다이얼 문자열은 해석하지 않음)
  2. 종료·만료 검사         ended 이거나 timeout 초과 → 만료 응답 (자동 재시작 없음)
  3. OptionMatcher        back / home / next / previous / option / invalid
  4. 액션 옵션             핸들러 실행 → StepResult 적용
     이동 옵션             핸들러 없이 바로 이동
  5. 커밋                  작업 사본을 sessions.save() 로 한 번에 저장
  6. after_turn 훅         (request, response) — 실패해도 응답에는 영향 없음

─── 원자성 ─────────────────────────────────────────────────────────────────
  모든 변경은 로드한 state의 deep copy(working)에 한다. 저장은 스텝 끝에서 한 번뿐이다.
  핸들러 실패·타임아웃·누락 시에는 working을 버리고, 스텝 이전 state에 ended만 표시해 저장한다.

─── 정책 ───────────────────────────────────────────────────────────────────
  - 빈 스택에서 back: 현재 노드를 다시 보여준다 (루트에서 반복해도 루트)
  - 액션 + target_step 옵션: End는 그대로 존중, 그 밖의 결과는 target_step 강제 이동으로 대체
  - 노드가 바뀌는 스텝에서만 현재 노드를 nav_stack에 push
  - 이동(옵션·GoTo·target_step)으로 진입한 노드는 페이지가 0으로 초기화 (같은 노드로의 GoTo 포함)
"""

from typing import Any, Callable, Dict, Optional

from ussdkit.core.actions.dispatcher import ActionDispatcher, ActionNotFound, HandlerFailure, HandlerTimeout
from ussdkit.core.actions.step_result import StepKind, StepResult
from ussdkit.core.api.schemas import UssdRequest, UssdResponse
from ussdkit.core.context import ActionContext
from ussdkit.core.logging import session_logger, setup_logger
from ussdkit.core.menu.models import MenuGraph, MenuNode, MenuOption
from ussdkit.core.navigation.locks import SessionLockRegistry
from ussdkit.core.navigation.matcher import MatchKind, MatchResult, OptionMatcher
from ussdkit.core.navigation.options import EngineOptions
from ussdkit.core.navigation.pagination import PaginationEngine
from ussdkit.core.state.session import SessionState
from ussdkit.core.state.stores import BaseSessionStore

# 이어하기 선택을 기다리는 세션의 current_node_id. 메뉴 그래프에는 존재하지 않는다.
RESUME_NODE_ID = "__resume__"

AfterTurnHook = Optional[Callable[[UssdRequest, UssdResponse], None]]


class NavigationEngine:
    """
    USSD 세션 내비게이션 엔진.

    MenuGraph는 모든 세션이 읽기 전용으로 공유한다. 세션별 상태는 SessionStore에만 있다.
    같은 session_id의 요청은 순차 처리되고, 다른 session_id끼리는 동시에 처리된다.
    """

    def __init__(
        self,
        graph: MenuGraph,
        sessions: BaseSessionStore,
        dispatcher: ActionDispatcher,
        options: Optional[EngineOptions] = None,
        after_turn: AfterTurnHook = None,
    ):
        self.graph = graph
        self.sessions = sessions
        self.dispatcher = dispatcher
        self.options = options or EngineOptions.from_settings()
        self.pagination = PaginationEngine(self.options)
        self.matcher = OptionMatcher(self.options, self.pagination)
        self._locks = SessionLockRegistry()
        self._after_turn = after_turn
        self.logger = setup_logger("NavigationEngine")

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "NavigationEngine":
        """
        manifest 구조:
          {
              "graph":            MenuGraph,
              "sessions_factory": () → SessionStore,
              "dispatcher":       ActionDispatcher,
              "options":          EngineOptions | None,
              "after_turn":       (request, response) → None | None,
          }
        """
        return cls(
            graph=manifest["graph"],
            sessions=manifest["sessions_factory"](),
            dispatcher=manifest["dispatcher"],
            options=manifest.get("options"),
            after_turn=manifest.get("after_turn"),
        )

    # ── 퍼블릭 API ────────────────────────────────────────────────────────────

    def handle(self, request: UssdRequest) -> UssdResponse:
        """한 턴 처리. 어떤 경우에도 응답을 반환한다 (예외는 로그 후 오류 응답으로 변환)."""
        try:
            with self._locks.hold(request.session_id):
                response = self._step(request)
        except Exception:
            self.logger.exception(f"[session={request.session_id}] step failed unexpectedly")
            response = UssdResponse(message=self.options.error_message, continue_session=False)

        self._fire_after_turn(request, response)
        return response

    def render(self, node: MenuNode, state: SessionState, prefix: Optional[str] = None) -> str:
        """노드 화면 = (안내 prefix) + 제목 + 옵션/페이지 줄."""
        lines = []
        if prefix:
            lines.append(prefix)
        if node.title:
            lines.append(node.title)
        page = self.pagination.current_page(state, node) if node.is_paginated else 0
        lines.extend(self.pagination.render_lines(node, page))
        return "\n".join(lines)

    # ── 스텝 ─────────────────────────────────────────────────────────────────

    def _step(self, request: UssdRequest) -> UssdResponse:
        log = session_logger(self.logger, request.session_id)

        stored = self.sessions.get(request.session_id)
        if stored is None:
            if not request.is_new_session:
                log.info("unknown session id on a continuation request; rejecting")
                return self._expired()
            return self._start(request, log)

        if stored.ended:
            log.info("request on ended session rejected")
            return self._expired()

        if stored.is_expired(self.options.session_timeout_sec):
            log.info("session timed out")
            stored.ended = True
            self.sessions.save(stored)
            return self._expired()

        working = stored.model_copy(deep=True)

        if working.current_node_id == RESUME_NODE_ID:
            return self._resume_choice(working, request, log)

        if not self.graph.has_node(working.current_node_id):
            log.error(f"current node '{working.current_node_id}' is not in menu '{self.graph.id}'")
            return self._fail(stored, self.options.error_message)

        return self._navigate(stored, working, request, log)

    def _start(self, request: UssdRequest, log) -> UssdResponse:
        if self.options.enable_session_resumption:
            previous = self.sessions.find_active_by_caller(request.caller_id)
            if (
                previous is not None
                and previous.session_id != request.session_id
                and previous.menu_id == self.graph.id
            ):
                state = self._new_state(request, RESUME_NODE_ID)
                state.resume_from = previous.session_id
                self._commit(state)
                log.info(f"offering resumption of session {previous.session_id}")
                return UssdResponse(message=self._render_resume(), continue_session=True)

        log.info(f"new session for caller '{request.caller_id}'")
        state = self._new_state(request, self.graph.root_node_id)
        return self._arrive(state, self.graph.root)

    def _navigate(
        self,
        stored: SessionState,
        working: SessionState,
        request: UssdRequest,
        log,
    ) -> UssdResponse:
        node = self.graph.node(working.current_node_id)
        page = self.pagination.current_page(working, node)
        match = self.matcher.match(node, request.raw_input, page)

        if match.kind == MatchKind.INVALID:
            log.info(f"invalid input on node '{node.id}'")
            return UssdResponse(
                message=self.render(node, stored, prefix=self.options.invalid_input_message),
                continue_session=True,
            )

        if match.kind == MatchKind.BACK:
            if working.nav_stack:
                target = working.nav_stack.pop()
                self.pagination.reset(working, target)
                working.current_node_id = target
            return self._arrive(working, self.graph.node(working.current_node_id))

        if match.kind == MatchKind.HOME:
            self._go_home(working)
            return self._arrive(working, self.graph.root)

        if match.kind == MatchKind.NEXT_PAGE:
            self.pagination.next_page(working, node)
            return self._arrive(working, node)

        if match.kind == MatchKind.PREVIOUS_PAGE:
            self.pagination.previous_page(working, node)
            return self._arrive(working, node)

        option = match.option
        if option.action_key:
            return self._run_action(stored, working, node, match, request, log)

        self._move(working, option.target_step)
        return self._arrive(working, self.graph.node(option.target_step))

    # ── 액션 ─────────────────────────────────────────────────────────────────

    def _run_action(
        self,
        stored: SessionState,
        working: SessionState,
        node: MenuNode,
        match: MatchResult,
        request: UssdRequest,
        log,
    ) -> UssdResponse:
        option = match.option
        try:
            handler = self.dispatcher.resolve(option.action_key)
        except ActionNotFound:
            log.error(f"no handler registered for action '{option.action_key}' (node '{node.id}')")
            return self._fail(stored, self.options.missing_handler_message)

        ctx = ActionContext(
            session_id=working.session_id,
            caller_id=working.caller_id,
            input=match.effective_input,
            raw_input=request.raw_input,
            node=node,
            option=option,
            state=working,
        )
        try:
            result = self.dispatcher.invoke(handler, ctx, timeout_sec=self.options.handler_timeout_sec)
        except HandlerTimeout as e:
            log.warning(f"action '{option.action_key}' timed out: {e}")
            return self._fail(stored, self.options.error_message)
        except HandlerFailure as e:
            log.error(f"action '{option.action_key}' failed: {e}", exc_info=e.__cause__ or e)
            return self._fail(stored, self.options.error_message)

        return self._apply(stored, working, node, option, result, log)

    def _apply(
        self,
        stored: SessionState,
        working: SessionState,
        node: MenuNode,
        option: MenuOption,
        result: StepResult,
        log,
    ) -> UssdResponse:
        if result.kind == StepKind.END:
            working.ended = True
            self._commit(working)
            return UssdResponse(
                message=result.message or self.options.default_end_message,
                continue_session=False,
            )

        # 액션 + target_step: 핸들러가 고른 목적지보다 옵션의 target_step이 우선
        if option.target_step is not None:
            self._move(working, option.target_step)
            return self._arrive(working, self.graph.node(option.target_step))

        if result.kind == StepKind.CONTINUE:
            self._commit(working)
            return UssdResponse(
                message=result.message or self.render(node, working),
                continue_session=True,
            )

        if result.kind == StepKind.GOTO:
            if not result.node_id or not self.graph.has_node(result.node_id):
                log.error(f"action '{option.action_key}' returned unknown node '{result.node_id}'")
                return self._fail(stored, self.options.error_message)
            self._move(working, result.node_id)
            return self._arrive(working, self.graph.node(result.node_id))

        # GO_HOME
        self._go_home(working)
        return self._arrive(working, self.graph.root)

    # ── 이어하기 ─────────────────────────────────────────────────────────────

    def _resume_choice(self, working: SessionState, request: UssdRequest, log) -> UssdResponse:
        text = (request.raw_input or "").strip()
        previous_id = working.resume_from

        if text not in (self.options.resume_command, self.options.start_fresh_command):
            return UssdResponse(
                message=self._render_resume(prefix=self.options.invalid_input_message),
                continue_session=True,
            )

        working.resume_from = None
        working.current_node_id = self.graph.root_node_id

        # 이전 세션도 잠근다. 이전 세션은 이어하기 대기 세션이 아니므로 교차 대기가 생기지 않는다.
        with self._locks.hold(previous_id):
            previous = self.sessions.get(previous_id) if previous_id else None
            resumable = (
                previous is not None
                and previous.is_active(self.options.session_timeout_sec)
                and self.graph.has_node(previous.current_node_id)
            )
            if text == self.options.resume_command and resumable:
                working.current_node_id = previous.current_node_id
                working.nav_stack = list(previous.nav_stack)
                working.scratch = dict(previous.scratch)
                working.page_index = dict(previous.page_index)
                log.info(f"resumed session {previous_id} at node '{previous.current_node_id}'")
            elif text == self.options.resume_command:
                log.info(f"session {previous_id} is no longer resumable; starting fresh")

            if previous is not None and not previous.ended:
                previous.ended = True
                self._commit(previous)

        return self._arrive(working, self.graph.node(working.current_node_id))

    def _render_resume(self, prefix: Optional[str] = None) -> str:
        lines = [prefix] if prefix else []
        lines += [
            self.options.resume_prompt,
            f"{self.options.resume_command}. {self.options.resume_label}",
            f"{self.options.start_fresh_command}. {self.options.start_fresh_label}",
        ]
        return "\n".join(lines)

    # ── 상태 전이 헬퍼 ───────────────────────────────────────────────────────

    def _move(self, state: SessionState, target: str) -> None:
        """target으로 이동. 노드가 바뀔 때만 push, 페이지는 항상 0으로."""
        self.pagination.reset(state, target)
        if target == state.current_node_id:
            return
        state.nav_stack.append(state.current_node_id)
        state.current_node_id = target

    def _go_home(self, state: SessionState) -> None:
        state.nav_stack.clear()
        if state.current_node_id != self.graph.root_node_id:
            self.pagination.reset(state, self.graph.root_node_id)
            state.current_node_id = self.graph.root_node_id

    def _arrive(self, state: SessionState, node: MenuNode) -> UssdResponse:
        """node 화면을 응답으로 만들고 커밋한다. 종료 노드면 세션을 닫는다."""
        if node.is_terminal:
            state.ended = True
            self._commit(state)
            return UssdResponse(
                message=node.title or self.options.default_end_message,
                continue_session=False,
            )
        self._commit(state)
        return UssdResponse(message=self.render(node, state), continue_session=True)

    def _fail(self, stored: SessionState, message: str) -> UssdResponse:
        """스텝 이전 state를 보존한 채 ended만 표시하고 일반 종료 응답을 만든다."""
        snapshot = stored.model_copy(deep=True)
        snapshot.ended = True
        self._commit(snapshot)
        return UssdResponse(message=message, continue_session=False)

    def _expired(self) -> UssdResponse:
        return UssdResponse(message=self.options.session_expired_message, continue_session=False)

    def _new_state(self, request: UssdRequest, node_id: str) -> SessionState:
        return SessionState(
            session_id=request.session_id,
            caller_id=request.caller_id,
            menu_id=self.graph.id,
            current_node_id=node_id,
        )

    def _commit(self, state: SessionState) -> None:
        state.touch()
        self.sessions.save(state)

    def _fire_after_turn(self, request: UssdRequest, response: UssdResponse) -> None:
        if self._after_turn is None:
            return
        try:
            self._after_turn(request, response)
        except Exception as e:
            self.logger.warning(f"after_turn hook error: {e}")
