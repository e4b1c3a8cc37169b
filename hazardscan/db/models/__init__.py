# hazardscan/db/models/__init__.py
from hazardscan.db.models.user import User
from hazardscan.db.models.inspection import Inspection
from hazardscan.db.models.usage import UsageLog
from hazardscan.db.models.setting import Setting

__all__ = ["User", "Inspection", "UsageLog", "Setting"]
