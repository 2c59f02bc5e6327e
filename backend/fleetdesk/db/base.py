from backend.fleetdesk.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.fleetdesk.models.tenant import Tenant  # noqa: F401
from backend.fleetdesk.models.user import User  # noqa: F401
from backend.fleetdesk.models.contractor import Contractor  # noqa: F401
from backend.fleetdesk.models.recurring_order import RecurringOrder  # noqa: F401
from backend.fleetdesk.models.order import Order  # noqa: F401
from backend.fleetdesk.models.invoice import Invoice  # noqa: F401
from backend.fleetdesk.models.invoice_item import InvoiceItem  # noqa: F401
from backend.fleetdesk.models.audit_log import AuditLog  # noqa: F401
