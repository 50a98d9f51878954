# ussdkit/core/api/schemas.py
"""USSD 진입점 Request/Response 스키마. 엔진의 전송 계약 전부."""

from pydantic import BaseModel, Field


class UssdRequest(BaseModel):
    """게이트웨이 한 턴 요청."""
    session_id:     str = Field(..., description="세션 식별자")
    caller_id:      str = Field("", description="발신자 식별자 (MSISDN 등)")
    raw_input:      str = Field("", description="사용자 입력 원문. 세션 시작 시에는 다이얼 문자열")
    is_new_session: bool = Field(False, description="게이트웨이가 새 세션으로 표시한 요청인지")


class UssdResponse(BaseModel):
    """한 턴 응답. continue_session=False 이면 게이트웨이가 세션을 닫는다."""
    message:          str = Field(..., description="사용자에게 보여줄 텍스트")
    continue_session: bool = Field(..., description="추가 입력을 받을지 여부")
