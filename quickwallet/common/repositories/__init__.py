from quickwallet.configuration.config import (
    Base,
    get_session_factory,
)

from .base_repository import (
    BaseRepository,
    ModelType,
    session_scope,
)

__all__ = [
    "Base",
    "get_session_factory",
    "BaseRepository",
    "ModelType",
    "session_scope",
]
