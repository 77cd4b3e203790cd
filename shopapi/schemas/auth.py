# shopapi/schemas/auth.py
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

# App-level roles stored on users.role
Role = Literal["customer", "admin"]


class AuthContext(SQLModel):
    """
    Authenticated caller, resolved once per request by the auth gate
    and handed to handlers as an explicit parameter.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    role: Role
    # Subject id at the identity provider (Firebase uid)
    uid: str | None = None


class VerifiedUser(SQLModel):
    id: int
    email: str
    role: Role


class VerifyResponse(SQLModel):
    """
    Response of the /auth/verify probes.
    """

    success: bool = True
    user: VerifiedUser
