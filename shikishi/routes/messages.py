# shikishi/routes/messages.py
from __future__ import annotations
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from shikishi.core.config import DEFAULT_VIEWPORT_WIDTH
from shikishi.models.board import BoardMessage
from shikishi.schemas.board import MessageOut, PositionOut
from shikishi.schemas.message import MessageCreate, MessageDeletedOut, PlacementRequest, PlacementOut
from shikishi.services.boards import board_size_tier, existing_positions, message_out, touch
from shikishi.services.deps import get_db, get_board_or_404, require_board_manager
from shikishi.services.placement import Position, clamp_position, find_position
from shikishi.services.websocket_manager import WebSocketManager

logger = logging.getLogger("shikishi.messages")
logger.setLevel(logging.INFO)

router = APIRouter(prefix="/api/messageboards", tags=["messages"])


@router.post("/{board_id}/messages", response_model=MessageOut, status_code=201)
async def add_message(board_id: int, payload: MessageCreate, db: Session = Depends(get_db)):
    """
    Attach a message to a board.

    Unless the client sends an explicit `position`, one is picked by the
    placement allocator from the board's current messages and the client's
    `viewportWidth`. Positions of messages added concurrently are not seen
    by each other.
    """
    board = get_board_or_404(db, board_id)

    if payload.position is not None:
        position = clamp_position(Position(payload.position.x, payload.position.y))
    else:
        position = find_position(
            existing_positions(db, board.id),
            payload.viewportWidth or DEFAULT_VIEWPORT_WIDTH,
            board_size_tier(board),
        ).position

    msg = BoardMessage(
        board_id=board.id,
        author=payload.author,
        content=payload.content,
        color=payload.color,
        position_x=position.x,
        position_y=position.y,
    )
    try:
        db.add(msg)
        touch(board)
        db.commit()
        db.refresh(msg)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error adding message to board {board_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to add message")

    out = message_out(msg)
    await WebSocketManager.get_instance().broadcast_to_board(
        board.id, {"type": "message_created", "message": out.model_dump(mode="json")}
    )
    return out


@router.post("/{board_id}/placement", response_model=PlacementOut)
def preview_placement(board_id: int, payload: PlacementRequest, db: Session = Depends(get_db)):
    """Run the allocator without storing anything."""
    board = get_board_or_404(db, board_id)
    outcome = find_position(
        existing_positions(db, board.id),
        payload.viewportWidth or DEFAULT_VIEWPORT_WIDTH,
        board_size_tier(board),
    )
    return PlacementOut(
        position=PositionOut(x=outcome.position.x, y=outcome.position.y),
        sizeTier=outcome.size_tier,
        attempts=outcome.attempts,
        degraded=outcome.degraded,
    )


@router.delete("/{board_id}/messages/{message_id}", response_model=MessageDeletedOut)
async def delete_message(
    board_id: int,
    message_id: int,
    db: Session = Depends(get_db),
    _: int = Depends(require_board_manager),
):
    msg = (
        db.query(BoardMessage)
        .filter(BoardMessage.id == message_id, BoardMessage.board_id == board_id)
        .first()
    )
    if not msg:
        raise HTTPException(status_code=404, detail="Message not found")

    try:
        db.delete(msg)
        touch(get_board_or_404(db, board_id))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting message {message_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete message")

    await WebSocketManager.get_instance().broadcast_to_board(
        board_id, {"type": "message_deleted", "message_id": message_id}
    )
    return {"success": True}
