import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.domains.trailers.models import Trailer


class PolicyStatus(str, Enum):
    ACTIVE = "active"
    EXPIRING = "expiring"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    REQUIRES_UPDATE = "requires_update"


class PolicyType(str, Enum):
    COMPREHENSIVE = "Comprehensive"
    LIABILITY = "Liability"
    COLLISION = "Collision"
    PHYSICAL_DAMAGE = "Physical Damage"
    CARGO = "Cargo"
    OTHER = "Other"


class PremiumFrequency(str, Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    SEMI_ANNUAL = "Semi-Annual"
    ANNUAL = "Annual"


class PolicyDocumentType(str, Enum):
    POLICY_DOCUMENT = "Policy Document"
    CERTIFICATE = "Certificate"
    ENDORSEMENT = "Endorsement"
    OTHER = "Other"


DEFAULT_NOTIFY_BEFORE_DAYS = 30


class InsurancePolicy(Base):
    """
    Insurance cover for a company-owned trailer.

    status is derived from expiry_date and notify_before_days on every write
    (see lifecycle.derive_status); verification_status moves only through the
    verify / reject / request-update actions.
    """
    __tablename__ = "insurance_policies"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trailer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("trailers.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    provider: Mapped[str] = mapped_column(String(255), nullable=False)
    policy_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    policy_type: Mapped[str] = mapped_column(String(50), default=PolicyType.COMPREHENSIVE.value)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expiry_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    premium: Mapped[float] = mapped_column(Float, nullable=False)
    premium_frequency: Mapped[str] = mapped_column(String(20), default=PremiumFrequency.ANNUAL.value)
    coverage_amount: Mapped[float | None] = mapped_column(Float)
    deductible: Mapped[float | None] = mapped_column(Float)

    docusign_envelope_id: Mapped[str | None] = mapped_column(String(100))

    # Verification workflow
    verification_status: Mapped[str] = mapped_column(
        String(20), default=VerificationStatus.PENDING.value, index=True
    )
    verified_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    status: Mapped[str] = mapped_column(String(20), default=PolicyStatus.ACTIVE.value, index=True)

    # Notification settings
    notify_before_days: Mapped[int] = mapped_column(Integer, default=DEFAULT_NOTIFY_BEFORE_DAYS)
    notify_by_email: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_by_sms: Mapped[bool] = mapped_column(Boolean, default=False)
    last_notification_sent: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    trailer: Mapped[Trailer] = relationship(Trailer)
    documents: Mapped[list["PolicyDocument"]] = relationship(
        "PolicyDocument",
        back_populates="policy",
        order_by="PolicyDocument.uploaded_at",
        cascade="all, delete-orphan",
    )


class PolicyDocument(Base):
    """A document attached to a policy. Rows are only ever appended."""
    __tablename__ = "insurance_policy_documents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    policy_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("insurance_policies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Reference by ID only; the document store is a separate domain
    document_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    document_type: Mapped[str] = mapped_column(String(50), default=PolicyDocumentType.POLICY_DOCUMENT.value)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    policy: Mapped["InsurancePolicy"] = relationship("InsurancePolicy", back_populates="documents")
