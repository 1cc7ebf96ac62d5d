from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from src.models.products import UserRole


class ClientRecord(BaseModel):
    client_id: int
    counsellor_id: int
    full_name: str
    enrollment_date: Optional[date] = None
    sale_type_id: Optional[int] = None
    lead_type_id: Optional[int] = None
    archived: bool = False
    created_at: Optional[datetime] = None


class UserRecord(BaseModel):
    id: int
    full_name: str
    email: Optional[str] = None
    emp_id: Optional[str] = None
    role: UserRole
    manager_id: Optional[int] = None
    designation: Optional[str] = None
    is_supervisor: bool = False
