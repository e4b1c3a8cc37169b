# hazardscan/core/constants.py
from enum import Enum


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class SafetyGrade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class HazardCategory(str, Enum):
    PPE = "PPE"
    FALL = "Fall"
    FIRE = "Fire"
    ELECTRICAL = "Electrical"
    CHEMICAL = "Chemical"
    MACHINERY = "Machinery"
    ENVIRONMENTAL = "Environmental"
    OTHER = "Other"


class HazardSeverity(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class SortField(str, Enum):
    CREATED_AT = "createdAt"
    RISK_SCORE = "riskScore"
    HAZARD_COUNT = "hazardCount"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


ANALYZE_ENDPOINT = "/api/inspections/analyze"

ALLOWED_IMAGE_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/bmp",
    "image/tiff",
})

# Runtime-overridable keys in the settings table
SETTING_MONTHLY_LIMIT = "monthly_inspection_limit"
