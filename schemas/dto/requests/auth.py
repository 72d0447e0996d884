"""
Request DTOs for authentication endpoints.

LoginRequest — POST /auth/login
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Request body for POST /auth/login.

    ``recaptchaToken`` is the widget response posted by the web client;
    ``recaptcha_token`` is accepted too. A missing ``email`` is not rejected
    here: the throttle reports it as unthrottled and the credential check
    fails it.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: str = ""
    recaptcha_token: Optional[str] = Field(default=None, alias="recaptchaToken")
