# ussdkit/core/manifest.py
"""
새 프로젝트 manifest.py 작성 시 boilerplate를 줄여주는 공통 유틸리티.

project.yaml 하나에 메뉴·액션·엔진 옵션을 선언하고, 여기서 NavigationEngine이 기대하는
manifest dict로 조립한다. 액션은 yaml에 적힌 점-경로만 import 한다 (모듈 스캔 없음).

─── project.yaml 예시 ──────────────────────────────────────────────────────
    options:                      # EngineOptions 필드 덮어쓰기 (선택)
      items_per_page: 3
    actions:                      # action_key → 프로젝트 모듈 기준 상대 경로
      BalanceCheck: handlers.BalanceCheckHandler
      Transfer:     handlers.TransferHandler
    menu:                         # core.menu.loader 형식
      id: demo_bank_menu
      root: Main
      nodes: [...]

─── 사용법 ─────────────────────────────────────────────────────────────────
    def load_manifest():
        return load_manifest_from_yaml(PROJECT_ROOT, "ussdkit.projects.demo_bank")
"""

import importlib
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from ussdkit.core.actions.dispatcher import ActionDispatcher
from ussdkit.core.menu.loader import build_graph
from ussdkit.core.navigation.options import EngineOptions
from ussdkit.core.state.stores import InMemorySessionStore


def resolve_class(module_path: str, project_module: str):
    """
    'module.ClassName' 형태의 경로를 파이썬 객체로 변환.

    Args:
        module_path: 'handlers.TransferHandler' 형태 (project_module 기준 상대 경로)
        project_module: 'ussdkit.projects.demo_bank' 같은 패키지 루트
    """
    parts = module_path.rsplit(".", 1)
    if len(parts) == 1:
        raise ValueError(f"Expected 'module.ClassName', got '{module_path}'")
    mod_path, class_name = parts
    mod = importlib.import_module(f"{project_module}.{mod_path}")
    return getattr(mod, class_name)


def load_yaml(project_root: Path) -> Dict[str, Any]:
    """project.yaml 파일을 dict로 로드."""
    with open(project_root / "project.yaml", "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def build_dispatcher(
    actions_config: Dict[str, str],
    project_module: str,
    timeout_sec: Optional[float] = None,
) -> ActionDispatcher:
    dispatcher = ActionDispatcher(timeout_sec=timeout_sec)
    for key, class_path in (actions_config or {}).items():
        dispatcher.register(key, resolve_class(class_path, project_module))
    return dispatcher


def load_manifest_from_yaml(
    project_root: Path,
    project_module: str,
    *,
    sessions_factory: Optional[Callable] = None,
    after_turn: Optional[Callable] = None,
    option_overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """project.yaml 로드 → 그래프 빌드·액션 resolve → manifest dict 반환.

    Args:
        project_root:     project.yaml이 위치한 디렉토리
        project_module:   프로젝트 Python 모듈 경로
        sessions_factory: SessionStore 생성 팩토리. 없으면 InMemorySessionStore
        after_turn:       (request, response) → None 턴 후 콜백
        option_overrides: yaml options 위에 추가로 덮어쓸 값 (테스트 등)
    """
    data = load_yaml(project_root)

    options = EngineOptions.from_settings({**(data.get("options") or {}), **(option_overrides or {})})
    graph = build_graph(data["menu"])
    dispatcher = build_dispatcher(data.get("actions", {}), project_module, options.handler_timeout_sec)

    if sessions_factory is None:
        timeout = options.session_timeout_sec
        sessions_factory = lambda: InMemorySessionStore(session_timeout_sec=timeout)

    return {
        "graph":            graph,
        "sessions_factory": sessions_factory,
        "dispatcher":       dispatcher,
        "options":          options,
        "after_turn":       after_turn,
    }
