"""
School API Backend — User SQLAlchemy Model
============================================

What:  ORM model representing the `users` table (the credential store).
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by AuthService (register/login/list) and the store-validated auth gate.

Table Design:
    - UUID primary key, generated in Python so SQLite and PostgreSQL behave alike
    - email: stored normalised (trimmed, lower-case) under a UNIQUE constraint.
      The constraint is what makes duplicate registration impossible; the
      service-level lookup only produces the friendlier error first.
    - password_hash: bcrypt output; never serialised to clients
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from school_api.database import Base


class User(Base):
    """
    An account that can log in.

    Lifecycle:
        Created by registration, read by login, the user listing and the
        auth gate. Never updated or deleted by the auth flow.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        comment="Normalised (lower-case) login email",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash; never the plaintext",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
    )

    def __repr__(self) -> str:
        # No password_hash here: reprs end up in logs
        return f"<User(id={self.id}, email='{self.email}')>"
