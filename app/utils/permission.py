from typing import Optional
from sqlalchemy.orm import Session

from app.core.constants import OrgRoleEnum, ORG_ROLE_LEVELS
from app.crud.organization import organization as crud_organization


class PermissionHelper:
    @staticmethod
    def has_minimum_role(role: Optional[OrgRoleEnum], required: OrgRoleEnum) -> bool:
        if role is None:
            return False
        return ORG_ROLE_LEVELS[OrgRoleEnum(role)] >= ORG_ROLE_LEVELS[required]

    @staticmethod
    def get_member_role(db: Session, org_id: int, user_id: int) -> Optional[OrgRoleEnum]:
        return crud_organization.get_member_role(db, org_id=org_id, user_id=user_id)

    @staticmethod
    def can_manage_content(db: Session, org_id: int, user_id: int) -> bool:
        """Creator or above in the organization."""
        role = PermissionHelper.get_member_role(db, org_id, user_id)
        return PermissionHelper.has_minimum_role(role, OrgRoleEnum.CREATOR)
