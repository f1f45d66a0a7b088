from app.core.models.department import Department
from app.core.models.room import Room
from app.core.models.outing_request import OutingRequest
from app.core.models.approval_history import ApprovalHistory

__all__ = [
    "ApprovalHistory",
    "Department",
    "OutingRequest",
    "Room",
]
