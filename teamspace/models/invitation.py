import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from teamspace.models.base import Base
from teamspace.models.enums import InvitationStatus, Role

_PENDING_ONLY = sa.text("status = 'pending'")

class Invitation(Base):
    __tablename__ = "org_invitations"
    __table_args__ = (
        # one pending invitation per (org, email); accepted/expired rows are history
        sa.Index(
            "uq_org_invitations_pending_email",
            "org_id",
            "email",
            unique=True,
            postgresql_where=_PENDING_ONLY,
            sqlite_where=_PENDING_ONLY,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, sa.ForeignKey("orgs.id"), index=True, nullable=False)

    email: Mapped[str] = mapped_column(sa.String(320), index=True, nullable=False)
    role: Mapped[Role] = mapped_column(sa.Enum(Role, name="role"), nullable=False, default=Role.member)
    invited_by: Mapped[uuid.UUID] = mapped_column(sa.Uuid, sa.ForeignKey("users.id"), nullable=False)

    token: Mapped[str] = mapped_column(sa.String(64), unique=True, index=True, nullable=False)
    status: Mapped[InvitationStatus] = mapped_column(
        sa.Enum(InvitationStatus, name="invitation_status"),
        nullable=False,
        default=InvitationStatus.pending,
    )

    expires_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
