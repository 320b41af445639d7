from allocation.models.base import Base  # noqa: F401

from allocation.models.listing import Listing  # noqa: F401
from allocation.models.applicant import Applicant  # noqa: F401
from allocation.models.offer import Offer  # noqa: F401
from allocation.models.audit_log import AuditLog  # noqa: F401
