# ussdkit/core/navigation/pagination.py
"""
PaginationEngine: 노드의 option_list 항목을 페이지로 잘라 보여준다.

  N개 항목, 페이지 크기 P → page_count = ceil(N / P) (최소 1)
  k번째 페이지(0부터): items[k*P : min(N, (k+1)*P)], 화면 번호는 1부터 다시 매김
  고정 옵션(option()으로 추가)  → 모든 페이지에 자기 토큰으로 표시
  k > 0                  → "previous" 항목 추가
  k < page_count - 1     → "next" 항목 추가

  마지막 페이지에서 next, 첫 페이지에서 previous 는 같은 페이지를 다시 보여준다 (no-op).
  다른 노드에서 진입하면 그 노드의 페이지는 0으로 초기화된다 (reset).
  페이지 인덱스는 SessionState.page_index[node_id] 에 저장된다.
"""

from math import ceil
from typing import List, Optional, Tuple

from ussdkit.core.menu.models import MenuNode, MenuOption
from ussdkit.core.navigation.options import EngineOptions
from ussdkit.core.state.session import SessionState


class PaginationEngine:
    def __init__(self, options: EngineOptions):
        self.options = options

    # ── 계산 ──────────────────────────────────────────────────────────────

    @staticmethod
    def page_count(total: int, per_page: int) -> int:
        return max(1, ceil(total / per_page))

    def clamp(self, node: MenuNode, page: int) -> int:
        last = self.page_count(len(node.list_options), node.items_per_page) - 1
        return min(max(page, 0), last)

    def current_page(self, state: SessionState, node: MenuNode) -> int:
        return self.clamp(node, state.page_index.get(node.id, 0))

    def page_options(self, node: MenuNode, page: int) -> List[MenuOption]:
        if not node.is_paginated:
            return list(node.literal_options)
        items = node.list_options
        start, end = self.page_bounds(node, page)
        return list(items[start:end])

    def option_at(self, node: MenuNode, page: int, position: int) -> Optional[MenuOption]:
        """(페이지, 화면 번호 1..shown) → 절대 옵션. 범위 밖이면 None."""
        shown = self.page_options(node, page)
        if 1 <= position <= len(shown):
            return shown[position - 1]
        return None

    # ── 이동 ──────────────────────────────────────────────────────────────

    def next_page(self, state: SessionState, node: MenuNode) -> int:
        page = self.clamp(node, self.current_page(state, node) + 1)
        state.page_index[node.id] = page
        return page

    def previous_page(self, state: SessionState, node: MenuNode) -> int:
        page = self.clamp(node, self.current_page(state, node) - 1)
        state.page_index[node.id] = page
        return page

    @staticmethod
    def reset(state: SessionState, node_id: str) -> None:
        state.page_index.pop(node_id, None)

    # ── 렌더링 ────────────────────────────────────────────────────────────

    def render_lines(self, node: MenuNode, page: int) -> List[str]:
        """페이지 항목 줄 + 이전/다음 명령 줄. 제목은 포함하지 않는다."""
        if not node.is_paginated:
            return [f"{o.input}. {o.label}" for o in node.literal_options if o.label]

        page = self.clamp(node, page)
        lines = [f"{i}. {o.label}" for i, o in enumerate(self.page_options(node, page), start=1)]
        lines += [f"{o.input}. {o.label}" for o in node.fixed_options if o.label]
        total_pages = self.page_count(len(node.list_options), node.items_per_page)
        if page > 0:
            lines.append(f"{self.options.previous_page_command}. {self.options.previous_page_label}")
        if page < total_pages - 1:
            lines.append(f"{self.options.next_page_command}. {self.options.next_page_label}")
        return lines

    def page_bounds(self, node: MenuNode, page: int) -> Tuple[int, int]:
        """(시작, 끝) 절대 인덱스. 끝은 포함하지 않는다."""
        page = self.clamp(node, page)
        total = len(node.list_options)
        start = page * node.items_per_page
        return start, min(total, start + node.items_per_page)
