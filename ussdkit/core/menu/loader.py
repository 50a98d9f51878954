# ussdkit/core/menu/loader.py
"""
선언형 메뉴 정의(dict / YAML) → MenuGraph.

MenuBuilder와 같은 결과를 만든다. 빌더 체이닝 대신 노드 레코드 목록으로 메뉴를 기술할 때 사용.

─── 레코드 형식 ─────────────────────────────────────────────────────────────
    id: demo_bank_menu
    root: Main
    items_per_page: 5            # 선택. 없으면 settings.USSD_ITEMS_PER_PAGE
    nodes:
      - id: Main
        message: Welcome to Demo Bank     # 또는 lines: [..., ...]
        options:
          - {input: "1", label: Check Balance, action: BalanceCheck}
          - {input: "2", label: Transfer Money, goto: TransferRecipient}
      - id: TransferRecipient
        message: "Enter recipient phone number:"
        input: {action: Transfer}          # 와일드카드
      - id: Products
        message: "Our Products:"
        items:                             # option_list
          labels: [Product A - GHS 10, ...]
          values: [A, ...]                 # 선택. 없으면 labels
          action: ProductSelect
          items_per_page: 3
      - id: Goodbye
        message: Bye
        terminal: true
        allow_back: false
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ussdkit.core.menu.builder import BuildError, MenuBuilder, NodeBuilder
from ussdkit.core.menu.models import MenuGraph


def build_graph(data: Dict[str, Any]) -> MenuGraph:
    """메뉴 정의 dict를 MenuBuilder에 순서대로 적용해 그래프를 만든다."""
    if "id" not in data:
        raise BuildError("Menu definition requires an 'id'.")

    builder = MenuBuilder(data["id"], items_per_page=data.get("items_per_page"))
    if data.get("root"):
        builder.root(str(data["root"]))

    for record in data.get("nodes", []):
        if "id" not in record:
            raise BuildError(f"Node record without 'id' in menu '{data['id']}': {record}")
        _apply_record(builder.node_builder(str(record["id"])), record)

    return builder.build()


def load_menu_yaml(path: Union[str, Path]) -> MenuGraph:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    # project.yaml처럼 menu 섹션 안에 정의가 들어 있는 파일도 허용
    if isinstance(data, dict) and "menu" in data and "nodes" not in data:
        data = data["menu"]
    return build_graph(data)


def _apply_record(n: NodeBuilder, record: Dict[str, Any]) -> None:
    if "message" in record:
        n.message(str(record["message"]))
    for line in record.get("lines", []):
        n.line(str(line))
    if record.get("terminal"):
        n.terminal()
    if record.get("allow_back") is False:
        n.no_back_navigation()

    for opt in record.get("options", []):
        n.option(
            str(opt["input"]),
            str(opt.get("label", "")),
            goto=opt.get("goto"),
            action=opt.get("action"),
            value=opt.get("value"),
        )

    items = record.get("items")
    if items:
        labels = [str(label) for label in items.get("labels", [])]
        values = items.get("values") or labels
        if len(values) != len(labels):
            raise BuildError(f"Node '{record['id']}': items.values and items.labels differ in length.")
        n.option_list(
            list(zip(labels, values)),
            lambda pair: pair[0],
            value_fn=lambda pair: pair[1],
            action=items.get("action"),
            goto=items.get("goto"),
            auto_paginate=items.get("auto_paginate", True),
            items_per_page=items.get("items_per_page"),
        )

    wildcard = record.get("input")
    if wildcard:
        n.input(action=wildcard.get("action"), goto=wildcard.get("goto"))
