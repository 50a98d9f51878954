# ussdkit/core/navigation/options.py
"""엔진 단위 설정. 기본값은 settings(.env)에서 오며 프로젝트별로 일부만 덮어쓸 수 있다."""

from typing import Any, Dict, Optional

from pydantic import BaseModel

from ussdkit.core.config import settings


class EngineOptions(BaseModel):
    session_timeout_sec:          float = 300
    back_command:                 str = "0"
    home_command:                 str = "#"
    next_page_command:            str = "99"
    previous_page_command:        str = "98"
    next_page_label:              str = "Next"
    previous_page_label:          str = "Previous"
    items_per_page:               int = 5
    invalid_input_message:        str = "Invalid input. Please try again."
    default_end_message:          str = "Thank you for using our service."
    error_message:                str = "An error occurred. Please try again later."
    missing_handler_message:      str = "This service is currently unavailable. Please try again later."
    session_expired_message:      str = "Your session has expired. Please dial again."
    enable_auto_back_navigation:  bool = True
    enable_session_resumption:    bool = False
    resume_prompt:                str = "You have an unfinished session."
    resume_command:               str = "1"
    resume_label:                 str = "Continue"
    start_fresh_command:          str = "2"
    start_fresh_label:            str = "Start over"
    handler_timeout_sec:          float = 10

    @classmethod
    def from_settings(cls, overrides: Optional[Dict[str, Any]] = None) -> "EngineOptions":
        """
        settings 값으로 채운 뒤 overrides(project.yaml의 options 섹션 등)를 덮어쓴다.

        overrides 키는 필드명 그대로 사용한다. 예: {"items_per_page": 3}
        """
        base = cls(
            session_timeout_sec=settings.USSD_SESSION_TIMEOUT_SEC,
            back_command=settings.USSD_BACK_COMMAND,
            home_command=settings.USSD_HOME_COMMAND,
            next_page_command=settings.USSD_NEXT_PAGE_COMMAND,
            previous_page_command=settings.USSD_PREVIOUS_PAGE_COMMAND,
            next_page_label=settings.USSD_NEXT_PAGE_LABEL,
            previous_page_label=settings.USSD_PREVIOUS_PAGE_LABEL,
            items_per_page=settings.USSD_ITEMS_PER_PAGE,
            invalid_input_message=settings.USSD_INVALID_INPUT_MESSAGE,
            default_end_message=settings.USSD_DEFAULT_END_MESSAGE,
            error_message=settings.USSD_ERROR_MESSAGE,
            missing_handler_message=settings.USSD_MISSING_HANDLER_MESSAGE,
            session_expired_message=settings.USSD_SESSION_EXPIRED_MESSAGE,
            enable_auto_back_navigation=settings.USSD_ENABLE_AUTO_BACK_NAVIGATION,
            enable_session_resumption=settings.USSD_ENABLE_SESSION_RESUMPTION,
            resume_prompt=settings.USSD_RESUME_PROMPT,
            resume_command=settings.USSD_RESUME_COMMAND,
            resume_label=settings.USSD_RESUME_LABEL,
            start_fresh_command=settings.USSD_START_FRESH_COMMAND,
            start_fresh_label=settings.USSD_START_FRESH_LABEL,
            handler_timeout_sec=settings.USSD_HANDLER_TIMEOUT_SEC,
        )
        if not overrides:
            return base
        return base.model_copy(update=dict(overrides))
