# shikishi/routes/boards.py
from __future__ import annotations
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from shikishi.core.security import create_manage_token
from shikishi.models.board import MessageBoard, BoardMessage
from shikishi.schemas.board import (
    BoardCreate, BoardUpdate, BoardSummaryOut, BoardCreatedOut, BoardDetailOut, BoardDeletedOut
)
from shikishi.services.boards import board_summary_out, board_detail_out, count_messages, touch
from shikishi.services.deps import get_db, get_board_or_404, require_board_manager

logger = logging.getLogger("shikishi.boards")
logger.setLevel(logging.INFO)

router = APIRouter(prefix="/api/messageboards", tags=["messageboards"])


@router.get("", response_model=List[BoardSummaryOut])
def list_boards(db: Session = Depends(get_db)):
    rows = (
        db.query(MessageBoard, func.count(BoardMessage.id).label("message_count"))
        .outerjoin(BoardMessage, BoardMessage.board_id == MessageBoard.id)
        .group_by(MessageBoard.id)
        .order_by(MessageBoard.created_at.desc(), MessageBoard.id.desc())
        .all()
    )
    return [board_summary_out(board, int(cnt or 0)) for board, cnt in rows]


@router.post("", response_model=BoardCreatedOut, status_code=201)
def create_board(payload: BoardCreate, db: Session = Depends(get_db)):
    board = MessageBoard(
        title=payload.title,
        recipient=payload.recipient,
        background_color=payload.backgroundColor,
        size_tier=payload.sizeTier.value if payload.sizeTier else None,
    )
    try:
        db.add(board)
        db.commit()
        db.refresh(board)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating message board: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create message board")

    logger.info(f"Created message board {board.id} for recipient '{board.recipient}'")
    summary = board_summary_out(board, 0)
    return BoardCreatedOut(**summary.model_dump(), manageToken=create_manage_token(board.id))


@router.get("/{board_id}", response_model=BoardDetailOut)
def get_board(board_id: int, db: Session = Depends(get_db)):
    board = get_board_or_404(db, board_id)
    return board_detail_out(db, board)


@router.put("/{board_id}", response_model=BoardSummaryOut)
def update_board(
    board_id: int,
    payload: BoardUpdate,
    db: Session = Depends(get_db),
    _: int = Depends(require_board_manager),
):
    board = get_board_or_404(db, board_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("title") is not None:
        board.title = changes["title"]
    if changes.get("recipient") is not None:
        board.recipient = changes["recipient"]
    if changes.get("backgroundColor") is not None:
        board.background_color = changes["backgroundColor"]
    if "sizeTier" in changes:
        # explicit null switches the board back to count-derived sizing
        board.size_tier = payload.sizeTier.value if payload.sizeTier else None
    touch(board)

    try:
        db.commit()
        db.refresh(board)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating message board {board_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update message board")

    return board_summary_out(board, count_messages(db, board.id))


@router.delete("/{board_id}", response_model=BoardDeletedOut)
def delete_board(
    board_id: int,
    db: Session = Depends(get_db),
    _: int = Depends(require_board_manager),
):
    board = get_board_or_404(db, board_id)
    try:
        db.delete(board)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting message board {board_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete message board")

    logger.info(f"Deleted message board {board_id}")
    return {"message": "Message board deleted successfully"}
