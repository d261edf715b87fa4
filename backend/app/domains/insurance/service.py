"""
Insurance Service - policies, verification workflow and reminders.

Every mutating operation funnels through _save(), which re-derives the
lifecycle status before committing, so a policy moves from active to
expiring to expired as time passes and any write catches it up.
"""
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ServiceError, null_field_error
from app.core.storage import UploadRejected, stored_upload
from app.domains.documents.models import DocumentType
from app.domains.documents.service import DocumentsService
from app.domains.insurance.lifecycle import (
    MissingExpiryDate,
    derive_policy_status,
    is_due_for_reminder,
    start_of_month,
)
from app.domains.insurance.models import (
    InsurancePolicy,
    PolicyDocument,
    PolicyStatus,
    VerificationStatus,
)
from app.domains.insurance.schemas import InsurancePolicyCreate, InsurancePolicyUpdate
from app.domains.trailers.service import TrailersService

logger = logging.getLogger(__name__)

ALL_FILTER = "all"

REQUIRED_FIELDS = (
    "trailer_id",
    "provider",
    "policy_number",
    "policy_type",
    "start_date",
    "expiry_date",
    "premium",
    "premium_frequency",
    "notify_before_days",
    "notify_by_email",
    "notify_by_sms",
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InsuranceService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.trailers_service = TrailersService(db)
        self.documents_service = DocumentsService(db)

    # --- Queries ---

    def get_policy(self, policy_id: UUID) -> InsurancePolicy | None:
        return self.db.query(InsurancePolicy).filter(InsurancePolicy.id == policy_id).first()

    def get_policy_by_number(self, policy_number: str) -> InsurancePolicy | None:
        return self.db.query(InsurancePolicy).filter(InsurancePolicy.policy_number == policy_number).first()

    def list_policies(
        self,
        status: str | None = None,
        verification_status: str | None = None,
        trailer_id: UUID | None = None,
        expiring_soon: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> list[InsurancePolicy]:
        query = self.db.query(InsurancePolicy)

        if status and status != ALL_FILTER:
            query = query.filter(InsurancePolicy.status == status)
        if verification_status and verification_status != ALL_FILTER:
            query = query.filter(InsurancePolicy.verification_status == verification_status)
        if trailer_id:
            query = query.filter(InsurancePolicy.trailer_id == trailer_id)
        if expiring_soon:
            now = self.clock()
            window_end = now + timedelta(days=settings.INSURANCE_EXPIRING_SOON_DAYS)
            query = query.filter(InsurancePolicy.expiry_date >= now, InsurancePolicy.expiry_date <= window_end)

        return query.order_by(InsurancePolicy.expiry_date.asc()).offset(skip).limit(limit).all()

    def list_due_for_reminder(self) -> list[InsurancePolicy]:
        now = self.clock()
        policies = self.db.query(InsurancePolicy).order_by(InsurancePolicy.expiry_date.asc()).all()
        return [p for p in policies if is_due_for_reminder(now, p)]

    def get_stats(self) -> dict[str, int]:
        now = self.clock()
        window_end = now + timedelta(days=settings.INSURANCE_EXPIRING_SOON_DAYS)
        query = self.db.query(InsurancePolicy)

        def count_status(value: str) -> int:
            return query.filter(InsurancePolicy.status == value).count()

        def count_verification(value: str) -> int:
            return query.filter(InsurancePolicy.verification_status == value).count()

        return {
            "total_policies": query.count(),
            "active_policies": count_status(PolicyStatus.ACTIVE.value),
            "expired_policies": count_status(PolicyStatus.EXPIRED.value),
            "expiring_policies": query.filter(
                InsurancePolicy.expiry_date >= now,
                InsurancePolicy.expiry_date <= window_end,
                InsurancePolicy.status != PolicyStatus.EXPIRED.value,
            ).count(),
            "reminders_sent": query.filter(
                InsurancePolicy.last_notification_sent >= start_of_month(now)
            ).count(),
            "reminders_due": len(self.list_due_for_reminder()),
            "pending_verification": count_verification(VerificationStatus.PENDING.value),
            "verified": count_verification(VerificationStatus.VERIFIED.value),
            "rejected": count_verification(VerificationStatus.REJECTED.value),
            "requires_update": count_verification(VerificationStatus.REQUIRES_UPDATE.value),
        }

    # --- Lifecycle ---

    def refresh_status(self, policy: InsurancePolicy) -> ServiceError | None:
        """Re-derive policy.status in place. Returns an error instead of guessing a status."""
        try:
            new_status = derive_policy_status(self.clock(), policy).value
        except MissingExpiryDate as e:
            return ServiceError.validation(str(e))
        if policy.status != new_status:
            logger.info(f"Policy {policy.policy_number}: status {policy.status} -> {new_status}")
            policy.status = new_status
        return None

    def _save(self, policy: InsurancePolicy) -> InsurancePolicy | ServiceError:
        error = self.refresh_status(policy)
        if error:
            self.db.rollback()
            return error
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if "policy_number" in str(e.orig):
                return ServiceError.conflict("Policy number already exists")
            raise
        self.db.refresh(policy)
        return policy

    # --- CRUD ---

    def create_policy(self, data: InsurancePolicyCreate) -> InsurancePolicy | ServiceError:
        if not self.trailers_service.get_trailer(data.trailer_id):
            return ServiceError.not_found("Trailer not found")
        if self.get_policy_by_number(data.policy_number):
            return ServiceError.conflict("Policy number already exists")

        values = data.model_dump(exclude_none=True)
        policy = InsurancePolicy(**values)
        policy.verification_status = VerificationStatus.PENDING.value
        if policy.status is None:
            policy.status = PolicyStatus.ACTIVE.value
        self.db.add(policy)
        result = self._save(policy)
        if not isinstance(result, ServiceError):
            logger.info(f"Created policy {policy.policy_number} for trailer {policy.trailer_id} ({policy.status})")
        return result

    def update_policy(self, policy_id: UUID, data: InsurancePolicyUpdate) -> InsurancePolicy | ServiceError:
        policy = self.get_policy(policy_id)
        if not policy:
            return ServiceError.not_found("Insurance policy not found")

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("status") is None:
            update_data.pop("status", None)

        error = null_field_error(update_data, REQUIRED_FIELDS)
        if error:
            return error

        trailer_id = update_data.get("trailer_id")
        if trailer_id and not self.trailers_service.get_trailer(trailer_id):
            return ServiceError.not_found("Trailer not found")

        policy_number = update_data.get("policy_number")
        if policy_number and policy_number != policy.policy_number:
            if self.get_policy_by_number(policy_number):
                return ServiceError.conflict("Policy number already exists")

        for field, value in update_data.items():
            setattr(policy, field, value)
        return self._save(policy)

    def delete_policy(self, policy_id: UUID) -> bool:
        policy = self.get_policy(policy_id)
        if not policy:
            return False
        self.db.delete(policy)
        self.db.commit()
        return True

    # --- Verification workflow ---

    def verify(self, policy_id: UUID, verifier_id: UUID) -> InsurancePolicy | ServiceError:
        policy = self.get_policy(policy_id)
        if not policy:
            return ServiceError.not_found("Insurance policy not found")

        policy.verification_status = VerificationStatus.VERIFIED.value
        policy.verified_by = verifier_id
        policy.verified_at = self.clock()
        policy.rejection_reason = None
        logger.info(f"Policy {policy.policy_number} verified by {verifier_id}")
        return self._save(policy)

    def reject(self, policy_id: UUID, verifier_id: UUID, reason: str | None) -> InsurancePolicy | ServiceError:
        if not reason or not reason.strip():
            return ServiceError.validation("Rejection reason is required")

        policy = self.get_policy(policy_id)
        if not policy:
            return ServiceError.not_found("Insurance policy not found")

        policy.verification_status = VerificationStatus.REJECTED.value
        policy.verified_by = verifier_id
        policy.verified_at = self.clock()
        policy.rejection_reason = reason.strip()
        logger.info(f"Policy {policy.policy_number} rejected by {verifier_id}: {policy.rejection_reason}")
        return self._save(policy)

    def request_update(self, policy_id: UUID, reason: str | None = None) -> InsurancePolicy | ServiceError:
        """Flag a policy as needing corrected details before it can be verified."""
        policy = self.get_policy(policy_id)
        if not policy:
            return ServiceError.not_found("Insurance policy not found")

        policy.verification_status = VerificationStatus.REQUIRES_UPDATE.value
        if reason:
            policy.rejection_reason = reason
        return self._save(policy)

    # --- Notifications ---

    def mark_notified(self, policy_id: UUID) -> InsurancePolicy | ServiceError:
        policy = self.get_policy(policy_id)
        if not policy:
            return ServiceError.not_found("Insurance policy not found")

        policy.last_notification_sent = self.clock()
        return self._save(policy)

    # --- Documents ---

    def _append_document(self, policy: InsurancePolicy, document_id: UUID, document_type: str) -> None:
        policy.documents.append(
            PolicyDocument(document_id=document_id, document_type=document_type, uploaded_at=self.clock())
        )

    def attach_document(
        self,
        policy_id: UUID,
        document_id: UUID,
        document_type: str,
    ) -> InsurancePolicy | ServiceError:
        policy = self.get_policy(policy_id)
        if not policy:
            return ServiceError.not_found("Insurance policy not found")
        if not self.documents_service.get_document(document_id):
            return ServiceError.not_found("Document not found")

        self._append_document(policy, document_id, document_type)
        return self._save(policy)

    def upload_document(
        self,
        policy_id: UUID,
        upload: UploadFile,
        document_type: str,
        uploaded_by: UUID | None,
    ) -> InsurancePolicy | ServiceError:
        """Store a file, record it and attach it in one step; the file is removed on any failure."""
        policy = self.get_policy(policy_id)
        if not policy:
            return ServiceError.not_found("Insurance policy not found")

        try:
            with stored_upload(upload) as stored:
                document = self.documents_service.add_document(stored, DocumentType.INSURANCE.value, uploaded_by)
                self._append_document(policy, document.id, document_type)
                result = self._save(policy)
                if not isinstance(result, ServiceError):
                    stored.keep()
        except UploadRejected as e:
            return ServiceError.validation(str(e))
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to attach upload {upload.filename} to policy {policy_id}")
            raise
        return result

    def link_docusign(
        self,
        policy_id: UUID,
        envelope_id: str,
        document_id: UUID | None = None,
    ) -> InsurancePolicy | ServiceError:
        policy = self.get_policy(policy_id)
        if not policy:
            return ServiceError.not_found("Insurance policy not found")

        if document_id and not self.documents_service.get_document(document_id):
            return ServiceError.not_found("Document not found")

        policy.docusign_envelope_id = envelope_id
        if document_id:
            self._append_document(policy, document_id, "Policy Document")
        return self._save(policy)
