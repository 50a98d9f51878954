# ussdkit/core/menu/builder.py
"""
MenuBuilder: 메뉴 그래프 조립기.

─── 사용법 ──────────────────────────────────────────────────────────────────
    menu = (
        MenuBuilder("demo_bank_menu")
        .root("Main")
        .node("Main", lambda n: n
            .message("Welcome to Demo Bank")
            .option("1", "Check Balance", action="BalanceCheck")
            .option("2", "Transfer Money", goto="TransferRecipient"))
        .node("TransferRecipient", lambda n: n
            .message("Enter recipient phone number:")
            .input(action="Transfer"))
        .build()
    )

  - 같은 node_id로 node()를 다시 호출하면 덮어쓰지 않고 이어서 누적한다.
  - 노드 id는 불투명 문자열이다. 오타·누락은 build()의 참조 검증이 잡는다.

─── build() 검증 (BuildError) ───────────────────────────────────────────────
  - root 미지정 / root 노드 미구성
  - 존재하지 않는 노드를 가리키는 goto
  - 한 노드에 와일드카드 옵션 2개 이상
  - goto도 action도 없는 옵션
  순환(cycle)은 허용한다.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from ussdkit.core.config import settings
from ussdkit.core.menu.models import WILDCARD_TOKEN, MenuGraph, MenuNode, MenuOption


class BuildError(ValueError):
    """메뉴 그래프 구성 오류. 기동 시점에만 발생하며 요청 처리 중에는 복구 대상이 아니다."""


class _NodeDraft:
    """빌드 중인 노드의 가변 상태. build()에서 frozen MenuNode로 확정된다."""

    def __init__(self, node_id: str, items_per_page: int):
        self.id = node_id
        self.lines: List[str] = []
        self.options: List[MenuOption] = []
        self.is_terminal = False
        self.is_paginated = False
        self.items_per_page = items_per_page
        self.allow_back = True

    def freeze(self) -> MenuNode:
        return MenuNode(
            id=self.id,
            title="\n".join(self.lines),
            options=tuple(self.options),
            is_terminal=self.is_terminal,
            is_paginated=self.is_paginated,
            items_per_page=self.items_per_page,
            allow_back=self.allow_back,
        )


class NodeBuilder:
    """단일 노드 설정. 모든 메서드는 체이닝을 위해 self를 반환한다."""

    def __init__(self, draft: _NodeDraft, default_items_per_page: int):
        self._draft = draft
        self._default_items_per_page = default_items_per_page

    def message(self, text: str) -> "NodeBuilder":
        self._draft.lines.append(text)
        return self

    def line(self, text: str) -> "NodeBuilder":
        return self.message(text)

    def terminal(self) -> "NodeBuilder":
        """이 노드에 도착하면 메시지를 보여주고 세션을 종료한다."""
        self._draft.is_terminal = True
        return self

    def no_back_navigation(self) -> "NodeBuilder":
        """전역 back/home 명령을 이 노드에서는 가로채지 않는다 (토큰을 옵션으로 쓰고 싶을 때)."""
        self._draft.allow_back = False
        return self

    def option(
        self,
        input: str,
        label: str,
        *,
        goto: Optional[str] = None,
        action: Optional[str] = None,
        value: Optional[str] = None,
    ) -> "NodeBuilder":
        self._draft.options.append(MenuOption(
            input=input, label=label, target_step=goto, action_key=action, value=value,
        ))
        return self

    def input(self, *, action: Optional[str] = None, goto: Optional[str] = None) -> "NodeBuilder":
        """
        자유 입력(와일드카드) 옵션. 다른 옵션에 매칭되지 않은 입력을 원문 그대로 핸들러에 넘긴다.
        전화번호·금액·이름 같은 값을 받을 때 사용.
        """
        self._draft.options.append(MenuOption(
            input=WILDCARD_TOKEN, label="", target_step=goto, action_key=action, is_wildcard=True,
        ))
        return self

    def option_list(
        self,
        items: Iterable[Any],
        label_fn: Callable[[Any], str],
        *,
        action: Optional[str] = None,
        goto: Optional[str] = None,
        value_fn: Optional[Callable[[Any], Any]] = None,
        auto_paginate: bool = True,
        items_per_page: Optional[int] = None,
    ) -> "NodeBuilder":
        """
        임의의 항목 시퀀스를 번호 옵션 목록으로 추가한다.

        목록 항목 수가 items_per_page를 넘고 auto_paginate=True 이면 노드를 페이지네이션 대상으로
        표시하고 전체 항목을 그대로 저장한다. 페이지 자르기는 렌더링 시점의 일이다.
        option()으로 추가한 고정 옵션은 페이지로 나뉘지 않고 자기 토큰으로 매칭된다.

        Args:
            label_fn: 항목 → 화면에 표시할 라벨
            value_fn: 항목 → 핸들러에 전달할 값. 없으면 라벨을 사용.
        """
        per_page = items_per_page or self._default_items_per_page
        if per_page < 1:
            raise BuildError(f"items_per_page must be >= 1 (node '{self._draft.id}')")

        item_list = list(items)
        start = len([o for o in self._draft.options if not o.is_wildcard]) + 1
        for offset, item in enumerate(item_list):
            label = label_fn(item)
            value = value_fn(item) if value_fn else label
            self._draft.options.append(MenuOption(
                input=str(start + offset),
                label=label,
                target_step=goto,
                action_key=action,
                value=str(value),
                is_list_item=True,
            ))

        if auto_paginate and len([o for o in self._draft.options if o.is_list_item]) > per_page:
            self._draft.is_paginated = True
            self._draft.items_per_page = per_page
        return self


class MenuBuilder:
    """메뉴 그래프 빌더. build()가 검증을 통과한 불변 MenuGraph를 반환한다."""

    def __init__(self, menu_id: str, items_per_page: Optional[int] = None):
        self._menu_id = menu_id
        self._root: Optional[str] = None
        self._drafts: Dict[str, _NodeDraft] = {}
        self._items_per_page = items_per_page or settings.USSD_ITEMS_PER_PAGE

    def root(self, node_id: str) -> "MenuBuilder":
        self._root = node_id
        return self

    def node(self, node_id: str, configure: Optional[Callable[[NodeBuilder], Any]] = None) -> "MenuBuilder":
        """노드를 선언하거나 기존 선언에 이어 붙인다."""
        configure_fn = configure or (lambda n: n)
        configure_fn(self.node_builder(node_id))
        return self

    def node_builder(self, node_id: str) -> NodeBuilder:
        draft = self._drafts.get(node_id)
        if draft is None:
            draft = _NodeDraft(node_id, self._items_per_page)
            self._drafts[node_id] = draft
        return NodeBuilder(draft, self._items_per_page)

    def build(self) -> MenuGraph:
        if self._root is None:
            raise BuildError("Root node must be set before building the menu.")
        if self._root not in self._drafts:
            raise BuildError(f"Root node '{self._root}' has not been configured.")

        nodes = {node_id: draft.freeze() for node_id, draft in self._drafts.items()}
        for node in nodes.values():
            _validate_node(node, nodes)

        return MenuGraph(id=self._menu_id, root_node_id=self._root, node_map=nodes)


def _validate_node(node: MenuNode, nodes: Dict[str, MenuNode]) -> None:
    wildcards = [o for o in node.options if o.is_wildcard]
    if len(wildcards) > 1:
        raise BuildError(f"Node '{node.id}' declares {len(wildcards)} wildcard inputs; at most one is allowed.")

    for opt in node.options:
        if opt.target_step is None and opt.action_key is None:
            raise BuildError(
                f"Option '{opt.input}' on node '{node.id}' has neither a target node nor an action."
            )
        if opt.target_step is not None and opt.target_step not in nodes:
            raise BuildError(
                f"Option '{opt.input}' on node '{node.id}' targets unknown node '{opt.target_step}'."
            )
