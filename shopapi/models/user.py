# shopapi/models/user.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Local user record behind an external (Firebase) identity.

    Identity:
      - matched by email from the verified ID token
      - rows are provisioned out-of-band (seed_db.py / DBA), never
        self-registered through the API

    Access:
      - role: "customer" | "admin"
      - approved: must be true before any authenticated route is usable
    """

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)

    email: str = Field(
        unique=True,
        index=True,
        description="Email claimed by the identity provider token",
    )

    role: str = Field(
        default="customer",
        index=True,
        description="Application role: customer | admin",
    )

    approved: bool = Field(
        default=False,
        description="Access gate on top of identity verification",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
