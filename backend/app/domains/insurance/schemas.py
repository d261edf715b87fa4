from datetime import datetime, timezone
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from app.domains.insurance.lifecycle import days_until_expiry
from app.domains.insurance.models import (
    DEFAULT_NOTIFY_BEFORE_DAYS,
    PolicyDocumentType,
    PolicyType,
    PremiumFrequency,
)
from app.domains.trailers.schemas import TrailerSummary


class InsurancePolicyBase(BaseModel):
    provider: str = Field(min_length=1)
    policy_number: str = Field(min_length=1)
    policy_type: PolicyType = PolicyType.COMPREHENSIVE
    start_date: datetime
    expiry_date: datetime
    premium: float = Field(ge=0)
    premium_frequency: PremiumFrequency = PremiumFrequency.ANNUAL
    coverage_amount: float | None = Field(default=None, ge=0)
    deductible: float | None = Field(default=None, ge=0)
    docusign_envelope_id: str | None = None
    notify_before_days: int = Field(default=DEFAULT_NOTIFY_BEFORE_DAYS, ge=0)
    notify_by_email: bool = True
    notify_by_sms: bool = False
    notes: str | None = None

    class Config:
        use_enum_values = True


class InsurancePolicyCreate(InsurancePolicyBase):
    trailer_id: UUID
    # Lifecycle status is derived; clients may only cancel
    status: Literal["cancelled"] | None = None


class InsurancePolicyUpdate(BaseModel):
    trailer_id: UUID | None = None
    provider: str | None = Field(default=None, min_length=1)
    policy_number: str | None = Field(default=None, min_length=1)
    policy_type: PolicyType | None = None
    start_date: datetime | None = None
    expiry_date: datetime | None = None
    premium: float | None = Field(default=None, ge=0)
    premium_frequency: PremiumFrequency | None = None
    coverage_amount: float | None = Field(default=None, ge=0)
    deductible: float | None = Field(default=None, ge=0)
    docusign_envelope_id: str | None = None
    status: Literal["cancelled"] | None = None
    notify_before_days: int | None = Field(default=None, ge=0)
    notify_by_email: bool | None = None
    notify_by_sms: bool | None = None
    notes: str | None = None

    class Config:
        use_enum_values = True


class AttachDocumentRequest(BaseModel):
    document_id: UUID
    document_type: PolicyDocumentType = PolicyDocumentType.POLICY_DOCUMENT

    class Config:
        use_enum_values = True


class LinkDocuSignRequest(BaseModel):
    docusign_envelope_id: str = Field(min_length=1)
    document_id: UUID | None = None


class RejectPolicyRequest(BaseModel):
    # Emptiness is checked by the service so the error is a domain validation failure
    reason: str = ""


class RequestUpdateRequest(BaseModel):
    reason: str | None = None


class PolicyDocumentResponse(BaseModel):
    id: UUID
    document_id: UUID
    document_type: str
    uploaded_at: datetime

    class Config:
        from_attributes = True


class InsurancePolicyResponse(InsurancePolicyBase):
    id: UUID
    trailer_id: UUID
    trailer: TrailerSummary | None = None
    status: str
    verification_status: str
    verified_by: UUID | None
    verified_at: datetime | None
    rejection_reason: str | None
    last_notification_sent: datetime | None
    documents: list[PolicyDocumentResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @computed_field
    @property
    def days_until_expiry(self) -> int:
        return days_until_expiry(datetime.now(timezone.utc), self.expiry_date)


class InsuranceStatsResponse(BaseModel):
    total_policies: int
    active_policies: int
    expired_policies: int
    expiring_policies: int
    reminders_sent: int
    reminders_due: int
    pending_verification: int
    verified: int
    rejected: int
    requires_update: int
