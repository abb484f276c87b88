"""
Back-Office Backend: Administration Schemas
=============================================

Request/response models for the admin panel: user/role listing, role
changes, the audit log, and the cascading user deletion.

DeleteUserRequest accepts `userId` (the name the browser client sends) as
well as `user_id`.
"""

import uuid
from datetime import datetime
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "admin"]


class AdminUserResponse(BaseModel):
    """An account together with its effective role."""
    user_id: uuid.UUID
    email: str
    role: str = Field(description="Granted role, or 'user' when no role row exists")
    role_id: Optional[uuid.UUID] = Field(default=None, description="Role row id, if granted")
    created_at: datetime


class AdminActionResponse(BaseModel):
    id: uuid.UUID
    admin_id: uuid.UUID
    action_type: str
    target_user_id: uuid.UUID
    notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class RoleUpdateRequest(BaseModel):
    role: Role
    notes: Optional[str] = Field(default=None, max_length=1000)


class RoleUpdateResponse(BaseModel):
    success: bool = True
    message: str
    user_id: uuid.UUID
    role: str
    action_type: str


class DeleteUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: uuid.UUID = Field(alias="userId")
    notes: Optional[str] = Field(default=None, max_length=1000)


class DeleteUserResponse(BaseModel):
    success: bool = True
    message: str = "User deleted successfully"
    deleted: Dict[str, int] = Field(
        default_factory=dict, description="Rows removed by each cascade step, keyed by table"
    )
