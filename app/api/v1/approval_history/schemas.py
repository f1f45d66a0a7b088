from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class ApprovalHistoryResponse(BaseModel):
    id: UUID
    request_id: UUID
    approver_id: UUID
    stage: str
    action: str
    comments: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
