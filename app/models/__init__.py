# Fleet back office database models
# Import all models here for SQLAlchemy discovery

from app.models.catalogs import (                      # noqa
    AlertStatus, AlertType, DocumentStatus, IncidentStatus,
    MaintenanceStatus, BusStatus, ShiftStatus,
)
from app.models.user import User, Role, user_roles     # noqa
from app.models.bus import Bus                         # noqa
from app.models.incident import Incident               # noqa
from app.models.maintenance import Maintenance, MaintenancePart, Part, Workshop  # noqa
from app.models.document import Document               # noqa
from app.models.shift import Shift                     # noqa
from app.models.alert import Alert                     # noqa
