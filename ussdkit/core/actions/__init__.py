from ussdkit.core.actions.step_result import StepKind, StepResult
from ussdkit.core.actions.base_handler import BaseActionHandler
from ussdkit.core.actions.dispatcher import (
    ActionDispatcher,
    ActionNotFound,
    HandlerFailure,
    HandlerTimeout,
    default_action_key,
)

__all__ = [
    "StepKind",
    "StepResult",
    "BaseActionHandler",
    "ActionDispatcher",
    "ActionNotFound",
    "HandlerFailure",
    "HandlerTimeout",
    "default_action_key",
]
