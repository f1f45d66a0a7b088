from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    WARDEN = "warden"
    ADVISOR = "advisor"
    HOD = "hod"
    STUDENT = "student"
    PRINCIPAL = "principal"


class OutingType(str, Enum):
    LOCAL = "local"
    HOMETOWN = "hometown"


class ApprovalStage(str, Enum):
    ADVISOR = "advisor"
    HOD = "hod"
    WARDEN = "warden"
    COMPLETED = "completed"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Decision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ApprovalAction(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
