from sqlalchemy.orm import Session
from typing import Optional
from pydantic import BaseModel

from app.core.constants import OrgRoleEnum
from app.crud.base import CRUDBase
from app.models.organization import Organization, OrganizationMember


class CRUDOrganization(CRUDBase[Organization, BaseModel]):
    def get_member_role(self, db: Session, org_id: int, user_id: int) -> Optional[OrgRoleEnum]:
        member = (
            db.query(OrganizationMember)
            .filter(OrganizationMember.org_id == org_id)
            .filter(OrganizationMember.user_id == user_id)
            .first()
        )
        return member.role if member else None

    def add_member(self, db: Session, *, org_id: int, user_id: int, role: OrgRoleEnum) -> OrganizationMember:
        member = OrganizationMember(org_id=org_id, user_id=user_id, role=role)
        db.add(member)
        db.commit()
        db.refresh(member)
        return member


organization = CRUDOrganization(Organization)
