"""Business profile schemas (the caller's own company details)."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class ProfileFields(BaseModel):
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    company_type: Optional[Literal["individual", "company"]] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    tax_number: Optional[str] = None
    registration_number: Optional[str] = None
    bank_account: Optional[str] = None


class ProfileResponse(ProfileFields):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
