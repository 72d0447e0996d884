"""
Response DTOs for authentication endpoints.

UserResponse  — user summary inside LoginResponse
LoginResponse — POST /auth/login  (200)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Authenticated user summary returned after a successful login."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    name: Optional[str] = None
    username: Optional[str] = None


class LoginResponse(BaseModel):
    """Response body for POST /auth/login (200).

    ``throttled`` is False when no identity was supplied and the login
    throttle was skipped.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Login successful"
    user: UserResponse
    throttled: bool
