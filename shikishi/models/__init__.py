# shikishi/models/__init__.py
from shikishi.core.database import Base  # re-export for convenience

# Import all model modules so their tables attach to Base.metadata
from shikishi.models.board import MessageBoard, BoardMessage

__all__ = [
    "Base",
    "MessageBoard",
    "BoardMessage",
]
