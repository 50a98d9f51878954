# ussdkit/core/api/router_factory.py
"""USSD 진입점 라우터. 게이트웨이 어댑터는 이 Request/Response 스키마에 맞춰 호출한다."""

from typing import Any

from fastapi import APIRouter, HTTPException

from ussdkit.core.api.schemas import UssdRequest, UssdResponse
from ussdkit.core.config import settings


def create_ussd_router(engine: Any) -> APIRouter:
    """
    - POST /v1/ussd              : 한 턴 처리
    - GET  /v1/ussd/debug/{id}   : 개발용 세션 스냅샷 (DEV_MODE=true 시만)
    """
    router = APIRouter(prefix="/v1/ussd", tags=["ussd"])

    # 엔진은 잠금·핸들러 대기로 블로킹하므로 def 엔드포인트(스레드풀 실행)로 둔다
    @router.post("", response_model=UssdResponse)
    def handle(req: UssdRequest) -> UssdResponse:
        return engine.handle(req)

    if settings.DEV_MODE:
        @router.get("/debug/{session_id}")
        def debug_session(session_id: str):
            """
            개발용 세션 내부 상태 스냅샷.
            DEV_MODE=true 일 때만 등록됨 (.env에서 DEV_MODE=false로 비활성화).

            반환:
              state   - current_node_id, nav_stack, scratch, page_index, ended 등 전체 state
              menu    - 엔진이 사용하는 메뉴 id와 루트 노드
            """
            sessions = getattr(engine, "sessions", None)
            if sessions is None:
                raise HTTPException(status_code=501, detail="sessions not available on this engine")

            state = sessions.get(session_id)
            if state is None:
                raise HTTPException(status_code=404, detail=f"session '{session_id}' not found")

            return {
                "session_id": session_id,
                "state": state.model_dump(mode="json"),
                "menu": {"id": engine.graph.id, "root": engine.graph.root_node_id},
            }

    return router
