# ussdkit/core/logging.py
import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import Any, MutableMapping, Tuple

from ussdkit.core.config import settings

_LOGGERS = {}


def setup_logger(name: str) -> logging.Logger:
    if name in _LOGGERS:
        return _LOGGERS[name]

    logger = logging.getLogger(name)
    logger.setLevel(settings.LOG_LEVEL)

    formatter = logging.Formatter("[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s")

    # 중복 핸들러 방지
    if not logger.handlers:
        sh = logging.StreamHandler(sys.stdout)
        sh.setFormatter(formatter)
        logger.addHandler(sh)

        # LOG_TO_FILE=false 이면 stdout 만 사용 (테스트·컨테이너 환경)
        if settings.LOG_TO_FILE:
            os.makedirs(settings.LOG_DIR, exist_ok=True)
            fh = TimedRotatingFileHandler(
                os.path.join(settings.LOG_DIR, settings.LOG_FILE_NAME),
                when="midnight",
                backupCount=14,
                encoding="utf-8",
            )
            fh.setFormatter(formatter)
            logger.addHandler(fh)

    logger.propagate = False
    _LOGGERS[name] = logger
    return logger


class SessionLogAdapter(logging.LoggerAdapter):
    """로그 메시지 앞에 [session=...] 을 붙인다. 한 세션의 스텝들을 grep 하기 위함."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[session={self.extra['session_id']}] {msg}", kwargs


def session_logger(logger: logging.Logger, session_id: str) -> SessionLogAdapter:
    return SessionLogAdapter(logger, {"session_id": session_id})
