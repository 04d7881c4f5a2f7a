from sqlalchemy.orm import Session
from typing import List
from pydantic import BaseModel

from app.crud.base import CRUDBase
from app.models.question import Question


class CRUDQuestion(CRUDBase[Question, BaseModel]):
    def get_by_deck(self, db: Session, deck_id: int) -> List[Question]:
        return (
            db.query(Question)
            .filter(Question.deck_id == deck_id)
            .order_by(Question.position, Question.id)
            .all()
        )

    def get_by_ids(self, db: Session, ids: List[int]) -> List[Question]:
        if not ids:
            return []
        return db.query(Question).filter(Question.id.in_(ids)).all()


question = CRUDQuestion(Question)
