# ussdkit/core/menu/models.py
"""
메뉴 그래프 모델.

─── 구조 ────────────────────────────────────────────────────────────────────
  MenuGraph   id, root_node_id, nodes {node_id: MenuNode}
  MenuNode    한 화면. title(여러 줄 가능) + 순서 있는 options
  MenuOption  입력 토큰 하나. target_step / action_key 조합으로 동작 결정

─── 불변 ────────────────────────────────────────────────────────────────────
  MenuGraph는 MenuBuilder.build() 또는 build_graph()가 한 번 만들고 이후 수정하지 않는다.
  모든 세션이 같은 인스턴스를 읽기 전용으로 공유하므로 잠금이 필요 없다.
  모델은 frozen이며 options는 tuple이다.

─── MenuOption 조합 ─────────────────────────────────────────────────────────
  target_step만      순수 이동 (핸들러 호출 없음)
  action_key만       핸들러가 다음 상태를 결정
  둘 다              핸들러 실행 후 target_step으로 강제 이동 (End는 그대로 존중)
  둘 다 없음         BuildError
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# 와일드카드 옵션의 입력 토큰. 렌더링되지 않으며 매칭에도 쓰이지 않는다.
WILDCARD_TOKEN = "*"


class MenuOption(BaseModel):
    """
    노드에서 선택 가능한 입력 하나.

    value: 핸들러에 전달되는 "선택된 값". 기본은 input 토큰.
           option_list()로 만든 항목은 항목 자체의 값(value_fn 결과 또는 label)을 가진다.
    """

    model_config = ConfigDict(frozen=True)

    input:       str
    label:       str = ""
    target_step: Optional[str] = None
    action_key:  Optional[str] = None
    is_wildcard: bool = False
    value:       Optional[str] = None
    # option_list()로 추가된 항목. 페이지네이션 노드에서는 이 항목만 페이지로 나뉜다
    is_list_item: bool = False

    @property
    def effective_value(self) -> str:
        return self.value if self.value is not None else self.input


class MenuNode(BaseModel):
    """
    메뉴 화면 하나.

    is_paginated=True 이면 option_list 항목(list_options)만 페이지 대상이며,
    잘라내기는 PaginationEngine이 렌더링 시점에 한다. 그 밖의 리터럴 옵션(fixed_options)은
    모든 페이지에 자기 토큰 그대로 표시된다.
    allow_back=False 이면 이 노드에서는 전역 back/home 명령을 가로채지 않는다.
    """

    model_config = ConfigDict(frozen=True)

    id:             str
    title:          str = ""
    options:        Tuple[MenuOption, ...] = ()
    is_terminal:    bool = False
    is_paginated:   bool = False
    items_per_page: int = 5
    allow_back:     bool = True

    @property
    def wildcard(self) -> Optional[MenuOption]:
        for opt in self.options:
            if opt.is_wildcard:
                return opt
        return None

    @property
    def literal_options(self) -> Tuple[MenuOption, ...]:
        return tuple(o for o in self.options if not o.is_wildcard)

    @property
    def list_options(self) -> Tuple[MenuOption, ...]:
        return tuple(o for o in self.options if o.is_list_item)

    @property
    def fixed_options(self) -> Tuple[MenuOption, ...]:
        return tuple(o for o in self.options if not o.is_wildcard and not o.is_list_item)


class MenuGraph(BaseModel):
    """검증이 끝난 메뉴 그래프. 빌더 밖에서 직접 생성하지 않는다."""

    model_config = ConfigDict(frozen=True)

    id:           str
    root_node_id: str
    node_map:     Dict[str, MenuNode] = Field(default_factory=dict)

    @property
    def nodes(self) -> Mapping[str, MenuNode]:
        return MappingProxyType(self.node_map)

    @property
    def root(self) -> MenuNode:
        return self.node_map[self.root_node_id]

    def node(self, node_id: str) -> MenuNode:
        return self.node_map[node_id]

    def has_node(self, node_id: str) -> bool:
        return node_id in self.node_map
