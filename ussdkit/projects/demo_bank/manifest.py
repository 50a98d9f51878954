# ussdkit/projects/demo_bank/manifest.py
"""
데모 뱅크 manifest: project.yaml 하나로 메뉴·액션·옵션을 조립한다.

세션 저장소를 Redis 등으로 바꾸려면 sessions_factory만 교체하면 된다.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ussdkit.core.manifest import load_manifest_from_yaml

PROJECT_ROOT = Path(__file__).resolve().parent
PROJECT_MODULE = "ussdkit.projects.demo_bank"


def load_manifest(
    sessions_factory: Optional[Callable] = None,
    after_turn: Optional[Callable] = None,
    option_overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return load_manifest_from_yaml(
        PROJECT_ROOT,
        PROJECT_MODULE,
        sessions_factory=sessions_factory,
        after_turn=after_turn,
        option_overrides=option_overrides,
    )
