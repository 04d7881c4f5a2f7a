from sqlalchemy.orm import Session
from typing import List
from pydantic import BaseModel

from app.crud.base import CRUDBase
from app.models.assessment import Assessment


class CRUDAssessment(CRUDBase[Assessment, BaseModel]):
    def get_all_by_org(self, db: Session, org_id: int) -> List[Assessment]:
        return (
            db.query(Assessment)
            .filter(Assessment.org_id == org_id)
            .order_by(Assessment.created_at.desc(), Assessment.id.desc())
            .all()
        )


assessment = CRUDAssessment(Assessment)
