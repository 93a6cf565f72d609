import logging
from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from shikishi.core.database import SessionLocal
from shikishi.core.security import board_id_from_token
from shikishi.models.board import MessageBoard

logger = logging.getLogger("shikishi.deps")
logger.setLevel(logging.INFO)

bearer_scheme = HTTPBearer()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_board_or_404(db: Session, board_id: int) -> MessageBoard:
    board = db.get(MessageBoard, board_id)
    if not board:
        raise HTTPException(status_code=404, detail="Message board not found")
    return board


def get_managed_board_id(
    token: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> int:
    """Board id carried by the caller's manage token."""
    try:
        return board_id_from_token(token.credentials)
    except (JWTError, ValueError):
        raise HTTPException(401, "Invalid token")


def require_board_manager(board_id: int, managed_board_id: int = Depends(get_managed_board_id)) -> int:
    """
    Gate for destructive board operations; the path's board_id must match the token.
    """
    if managed_board_id != board_id:
        logger.warning(f"Manage token for board {managed_board_id} used against board {board_id}")
        raise HTTPException(status_code=403, detail="Not allowed")
    return board_id
