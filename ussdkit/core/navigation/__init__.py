from ussdkit.core.navigation.options import EngineOptions
from ussdkit.core.navigation.pagination import PaginationEngine
from ussdkit.core.navigation.matcher import MatchKind, MatchResult, OptionMatcher
from ussdkit.core.navigation.locks import SessionLockRegistry
from ussdkit.core.navigation.engine import RESUME_NODE_ID, NavigationEngine

__all__ = [
    "EngineOptions",
    "PaginationEngine",
    "MatchKind",
    "MatchResult",
    "OptionMatcher",
    "SessionLockRegistry",
    "RESUME_NODE_ID",
    "NavigationEngine",
]
