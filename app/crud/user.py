from pydantic import BaseModel

from app.crud.base import CRUDBase
from app.models.user import User


class CRUDUser(CRUDBase[User, BaseModel]):
    pass


user = CRUDUser(User)
