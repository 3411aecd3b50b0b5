"""Site Audit - concurrent website audit aggregation with AI recommendations."""

from siteaudit.core.audit import AuditProviders
from siteaudit.core.audit import run_audit_async as run_audit
from siteaudit.schemas.audit import AggregatedAudit
from siteaudit.schemas.common import ProviderResult, Status
from siteaudit.services.events import AuditContext
from siteaudit.services.validators import validate_url

__all__ = [
    "run_audit",
    "validate_url",
    "AuditProviders",
    "AuditContext",
    "AggregatedAudit",
    "ProviderResult",
    "Status",
]
