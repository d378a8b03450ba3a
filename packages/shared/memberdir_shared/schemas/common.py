from enum import Enum
from typing import Optional
from pydantic import BaseModel

class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"

class MembershipStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"

class ErrorResponse(BaseModel):
    detail: str
    request_id: Optional[str] = None
