"""String enumerations stored in text columns."""

from enum import Enum


class CompanySize(str, Enum):
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"
    ENTERPRISE = "ENTERPRISE"


class EmploymentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PROBATION = "PROBATION"
    ON_LEAVE = "ON_LEAVE"
    SUSPENDED = "SUSPENDED"
    TERMINATED = "TERMINATED"


class EmploymentType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERN = "INTERN"


class BankAccountType(str, Enum):
    SAVINGS = "SAVINGS"
    CURRENT = "CURRENT"
    SALARY = "SALARY"


class JurisdictionType(str, Enum):
    FEDERAL = "FEDERAL"
    COUNTRY = "COUNTRY"
    STATE = "STATE"
    PROVINCE = "PROVINCE"
    REGION = "REGION"
    CITY = "CITY"


class ComplianceSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ComplianceCategory(str, Enum):
    """Rule categories the default evaluator knows about.

    Rules may carry any category string; unknown ones are evaluated as GENERAL.
    """

    LABOR_LAW = "LABOR_LAW"
    TAX = "TAX"
    SAFETY = "SAFETY"
    PRIVACY = "PRIVACY"
    GENERAL = "GENERAL"


class CheckStatus(str, Enum):
    PENDING = "PENDING"
    COMPLIANT = "COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"
    WARNING = "WARNING"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"


class CheckType(str, Enum):
    MANUAL = "MANUAL"
    AUTOMATED = "AUTOMATED"


class LeaveRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    WITHDRAWN = "WITHDRAWN"


class PayrollRunStatus(str, Enum):
    DRAFT = "DRAFT"
    PROCESSING = "PROCESSING"
    CALCULATED = "CALCULATED"
    APPROVED = "APPROVED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    ERROR = "ERROR"


class PayrollItemType(str, Enum):
    EARNING = "EARNING"
    DEDUCTION = "DEDUCTION"
    TAX = "TAX"


class NotificationType(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ALERT = "ALERT"
    COMPLIANCE = "COMPLIANCE"


class NotificationPriority(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"
    ON_LEAVE = "ON_LEAVE"
    HOLIDAY = "HOLIDAY"
    WEEKEND = "WEEKEND"
    WORK_FROM_HOME = "WORK_FROM_HOME"


class HolidayType(str, Enum):
    NATIONAL = "NATIONAL"
    OPTIONAL = "OPTIONAL"
    COMPANY = "COMPANY"
