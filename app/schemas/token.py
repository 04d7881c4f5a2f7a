from pydantic import BaseModel


class TokenPayload(BaseModel):
    sub: str | None = None
    user_id: int | None = None
    jti: str | None = None
    exp: int | None = None
