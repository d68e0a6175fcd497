from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class SignUpRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1)


class SignInRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str
    # None falls back to REMEMBER_ME_DEFAULT
    remember_me: Optional[bool] = None


class SignUpResponse(BaseModel):
    message: str
    user: Optional[Dict[str, Any]] = None


class AuthSessionResponse(BaseModel):
    authenticated: bool
    user: Optional[Dict[str, Any]] = None
