# ussdkit/core/navigation/matcher.py
"""
OptionMatcher: 원문 입력 → 노드에서의 의미.

─── 매칭 우선순위 (선언 순서와 무관, 먼저 맞는 것이 이긴다) ─────────────────
  1. 전역 back / home     노드가 allow_back=False 이거나 전역 토글이 꺼져 있으면 건너뜀
  2. next / previous      페이지네이션 노드에서만
  3. 리터럴 토큰          대소문자 구분 정확 일치.
                          페이지네이션 노드는 고정 옵션을 먼저 자기 토큰으로 매칭하고, 그다음
                          숫자 입력을 현재 페이지 기준 번호(1..shown)로 보고 목록 항목으로 변환한다.
                          목록 항목의 절대 토큰으로는 매칭하지 않는다.
  4. 와일드카드           위에서 매칭되지 않은 모든 입력. payload는 trim 전 원문
  5. 없음                 INVALID → 엔진이 같은 노드를 오류 안내와 함께 다시 보여준다
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ussdkit.core.menu.models import MenuNode, MenuOption
from ussdkit.core.navigation.options import EngineOptions
from ussdkit.core.navigation.pagination import PaginationEngine


class MatchKind(str, Enum):
    BACK = "back"
    HOME = "home"
    NEXT_PAGE = "next_page"
    PREVIOUS_PAGE = "previous_page"
    OPTION = "option"
    INVALID = "invalid"


@dataclass(frozen=True)
class MatchResult:
    kind: MatchKind
    option: Optional[MenuOption] = None
    payload: Optional[str] = None

    @property
    def effective_input(self) -> str:
        """핸들러에 전달할 입력. 와일드카드면 원문, 아니면 옵션 값."""
        if self.option is None:
            return ""
        if self.option.is_wildcard:
            return self.payload or ""
        return self.option.effective_value


class OptionMatcher:
    def __init__(self, options: EngineOptions, pagination: PaginationEngine):
        self.options = options
        self.pagination = pagination

    def match(self, node: MenuNode, raw_input: Optional[str], page: int = 0) -> MatchResult:
        raw = raw_input or ""
        text = raw.strip()

        if node.allow_back and self.options.enable_auto_back_navigation:
            if text == self.options.back_command:
                return MatchResult(MatchKind.BACK)
            if text == self.options.home_command:
                return MatchResult(MatchKind.HOME)

        if node.is_paginated:
            if text == self.options.next_page_command:
                return MatchResult(MatchKind.NEXT_PAGE)
            if text == self.options.previous_page_command:
                return MatchResult(MatchKind.PREVIOUS_PAGE)
            for opt in node.fixed_options:
                if opt.input == text:
                    return MatchResult(MatchKind.OPTION, option=opt)
            # int()가 받는 십진 숫자만
            if text.isdecimal():
                opt = self.pagination.option_at(node, page, int(text))
                if opt is not None:
                    return MatchResult(MatchKind.OPTION, option=opt)
        else:
            for opt in node.literal_options:
                if opt.input == text:
                    return MatchResult(MatchKind.OPTION, option=opt)

        wildcard = node.wildcard
        if wildcard is not None:
            return MatchResult(MatchKind.OPTION, option=wildcard, payload=raw)

        return MatchResult(MatchKind.INVALID)
