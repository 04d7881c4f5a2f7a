from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import SessionLocal
from app.core.security import ALGORITHM
from app.crud.user import user as user_crud
from app.models.user import User
from app.schemas.token import TokenPayload

http_bearer = HTTPBearer()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(http_bearer)
) -> User:
    """Resolves the candidate or manager behind the bearer token.

    Every session operation is scoped to this user; a session owned by
    someone else is reported as missing further down.
    """
    try:
        payload = jwt.decode(credentials.credentials, settings.SECRET_KEY, algorithms=[ALGORITHM])
        token_data = TokenPayload(**payload)
    except (JWTError, ValidationError):
        raise _unauthenticated("Could not validate credentials")

    user_id = token_data.user_id
    if user_id is None and token_data.sub and token_data.sub.isdigit():
        user_id = int(token_data.sub)
    if user_id is None:
        raise _unauthenticated("Invalid token payload")

    user = user_crud.get(db, id=user_id)
    if not user:
        raise _unauthenticated("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )
    return user
