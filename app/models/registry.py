# Imported wherever the full mapper graph must be configured (crud, alembic, tests)
from app.models.user import User  # noqa: F401
from app.models.organization import Organization, OrganizationMember  # noqa: F401
from app.models.deck import Deck  # noqa: F401
from app.models.question import Question  # noqa: F401
from app.models.assessment import Assessment  # noqa: F401
from app.models.assessment_session import AssessmentSession  # noqa: F401
from app.models.assessment_answer import AssessmentAnswer  # noqa: F401
from app.models.proctoring_event import ProctoringEvent  # noqa: F401
from app.models.notification import Notification  # noqa: F401
