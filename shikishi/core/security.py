from jose import jwt
from datetime import datetime, timedelta, timezone
from shikishi.core.config import JWT_SECRET, JWT_ALGORITHM, MANAGE_TOKEN_EXPIRE_MINUTES

BOARD_SUBJECT_PREFIX = "board:"


def create_jwt_token(data: dict, expires_minutes: int = 60) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_jwt_token(token: str) -> dict:
    """
    Decode and validate JWT token.
    Raises JWTError if token is invalid or expired.
    """
    # jose.jwt.decode validates expiration when present
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])


def create_manage_token(board_id: int) -> str:
    """
    Issue the token that lets the board creator edit or clean up the board.
    """
    return create_jwt_token(
        {"sub": f"{BOARD_SUBJECT_PREFIX}{board_id}"},
        expires_minutes=MANAGE_TOKEN_EXPIRE_MINUTES,
    )


def board_id_from_token(token: str) -> int:
    """
    Return the board id a manage token was issued for.
    Raises JWTError for bad signatures/expiry and ValueError for foreign subjects.
    """
    payload = decode_jwt_token(token)
    sub = payload.get("sub")
    if not sub or not str(sub).startswith(BOARD_SUBJECT_PREFIX):
        raise ValueError("Token is not a board manage token")
    return int(str(sub)[len(BOARD_SUBJECT_PREFIX):])
