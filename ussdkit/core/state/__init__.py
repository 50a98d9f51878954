from ussdkit.core.state.session import SessionKey, SessionState
from ussdkit.core.state.stores import BaseSessionStore, InMemorySessionStore

__all__ = ["SessionKey", "SessionState", "BaseSessionStore", "InMemorySessionStore"]
