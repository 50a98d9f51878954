# ussdkit/core/config.py
import os
from pathlib import Path
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[2] / ".env")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings(BaseModel):
    APP_NAME: str = os.getenv("APP_NAME", "ussdkit")

    # 서버
    BACKEND_HOST: str = os.getenv("BACKEND_HOST", "0.0.0.0")
    BACKEND_PORT: int = int(os.getenv("BACKEND_PORT", "8010"))
    DEV_MODE: bool = _env_bool("DEV_MODE", "true")

    LOG_TO_FILE: bool = _env_bool("LOG_TO_FILE", "true")
    LOG_DIR: str = os.getenv("LOG_DIR", "logs")
    LOG_FILE_NAME: str = os.getenv("LOG_FILE_NAME", "app.log")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # 세션: 마지막 요청 이후 이 시간이 지나면 만료 처리
    USSD_SESSION_TIMEOUT_SEC: int = int(os.getenv("USSD_SESSION_TIMEOUT_SEC", "300"))

    # 전역 내비게이션 명령
    USSD_BACK_COMMAND: str = os.getenv("USSD_BACK_COMMAND", "0")
    USSD_HOME_COMMAND: str = os.getenv("USSD_HOME_COMMAND", "#")
    USSD_ENABLE_AUTO_BACK_NAVIGATION: bool = _env_bool("USSD_ENABLE_AUTO_BACK_NAVIGATION", "true")

    # 페이지네이션
    USSD_NEXT_PAGE_COMMAND: str = os.getenv("USSD_NEXT_PAGE_COMMAND", "99")
    USSD_PREVIOUS_PAGE_COMMAND: str = os.getenv("USSD_PREVIOUS_PAGE_COMMAND", "98")
    USSD_NEXT_PAGE_LABEL: str = os.getenv("USSD_NEXT_PAGE_LABEL", "Next")
    USSD_PREVIOUS_PAGE_LABEL: str = os.getenv("USSD_PREVIOUS_PAGE_LABEL", "Previous")
    USSD_ITEMS_PER_PAGE: int = int(os.getenv("USSD_ITEMS_PER_PAGE", "5"))

    # 사용자 메시지
    USSD_INVALID_INPUT_MESSAGE: str = os.getenv("USSD_INVALID_INPUT_MESSAGE", "Invalid input. Please try again.")
    USSD_DEFAULT_END_MESSAGE: str = os.getenv("USSD_DEFAULT_END_MESSAGE", "Thank you for using our service.")
    USSD_ERROR_MESSAGE: str = os.getenv("USSD_ERROR_MESSAGE", "An error occurred. Please try again later.")
    USSD_MISSING_HANDLER_MESSAGE: str = os.getenv(
        "USSD_MISSING_HANDLER_MESSAGE", "This service is currently unavailable. Please try again later."
    )
    USSD_SESSION_EXPIRED_MESSAGE: str = os.getenv(
        "USSD_SESSION_EXPIRED_MESSAGE", "Your session has expired. Please dial again."
    )

    # 세션 이어하기: 같은 발신자의 살아있는 세션이 있으면 새 세션 시작 시 선택지를 준다
    USSD_ENABLE_SESSION_RESUMPTION: bool = _env_bool("USSD_ENABLE_SESSION_RESUMPTION", "false")
    USSD_RESUME_PROMPT: str = os.getenv("USSD_RESUME_PROMPT", "You have an unfinished session.")
    USSD_RESUME_COMMAND: str = os.getenv("USSD_RESUME_COMMAND", "1")
    USSD_RESUME_LABEL: str = os.getenv("USSD_RESUME_LABEL", "Continue")
    USSD_START_FRESH_COMMAND: str = os.getenv("USSD_START_FRESH_COMMAND", "2")
    USSD_START_FRESH_LABEL: str = os.getenv("USSD_START_FRESH_LABEL", "Start over")

    # 액션 핸들러 실행 정책
    USSD_HANDLER_TIMEOUT_SEC: float = float(os.getenv("USSD_HANDLER_TIMEOUT_SEC", "10"))


settings = Settings()
