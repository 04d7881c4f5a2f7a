from enum import Enum


class OrgRoleEnum(str, Enum):
    CANDIDATE = "candidate"
    CREATOR = "creator"
    ADMIN = "admin"
    OWNER = "owner"

# owner > admin > creator > candidate
ORG_ROLE_LEVELS = {
    OrgRoleEnum.CANDIDATE: 0,
    OrgRoleEnum.CREATOR: 1,
    OrgRoleEnum.ADMIN: 2,
    OrgRoleEnum.OWNER: 3,
}

class AssessmentStatusEnum(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"

class SessionStatusEnum(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"

TERMINAL_SESSION_STATUSES = (SessionStatusEnum.COMPLETED, SessionStatusEnum.TIMED_OUT)

class CompletionReasonEnum(str, Enum):
    MANUAL = "manual"
    EXPIRED = "expired"

class ViolationTypeEnum(str, Enum):
    TAB_HIDDEN = "tab_hidden"

class NotificationTypeEnum(str, Enum):
    ASSESSMENT_RESULT = "assessment_result"

ASSESSMENT_COMPLETED_EVENT = "assessment_completed"

SCORE_BUCKET_COUNT = 10
QUESTION_STEM_PREVIEW_LENGTH = 80
