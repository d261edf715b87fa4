from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from app.core.dependencies import DbSession
from app.core.errors import raise_for_error
from app.core.security import TokenPayload, require_permission
from app.domains.insurance.models import PolicyDocumentType
from app.domains.insurance.schemas import (
    AttachDocumentRequest,
    InsurancePolicyCreate,
    InsurancePolicyResponse,
    InsurancePolicyUpdate,
    InsuranceStatsResponse,
    LinkDocuSignRequest,
    RejectPolicyRequest,
    RequestUpdateRequest,
)
from app.domains.insurance.service import InsuranceService
from app.domains.users.permissions import Action, Resource

router = APIRouter()


# --- Collection endpoints (declared before /{policy_id}) ---

@router.get("/", response_model=list[InsurancePolicyResponse])
def list_policies(
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.READ)),
    status_filter: str | None = Query(None, alias="status"),
    verification_status: str | None = Query(None),
    trailer_id: UUID | None = Query(None),
    expiring_soon: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    service = InsuranceService(db)
    return service.list_policies(
        status=status_filter,
        verification_status=verification_status,
        trailer_id=trailer_id,
        expiring_soon=expiring_soon,
        skip=skip,
        limit=limit,
    )


@router.get("/stats", response_model=InsuranceStatsResponse)
def get_stats(
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.READ)),
):
    service = InsuranceService(db)
    return service.get_stats()


@router.get("/reminders", response_model=list[InsurancePolicyResponse])
def list_due_reminders(
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.READ)),
):
    """Policies that are expiring or expired and have not been reminded this month."""
    service = InsuranceService(db)
    return service.list_due_for_reminder()


@router.post("/", response_model=InsurancePolicyResponse, status_code=status.HTTP_201_CREATED)
def create_policy(
    data: InsurancePolicyCreate,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.CREATE)),
):
    service = InsuranceService(db)
    return raise_for_error(service.create_policy(data))


# --- Single policy ---

@router.get("/{policy_id}", response_model=InsurancePolicyResponse)
def get_policy(
    policy_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.READ)),
):
    service = InsuranceService(db)
    policy = service.get_policy(policy_id)
    if not policy:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Insurance policy not found")
    return policy


@router.put("/{policy_id}", response_model=InsurancePolicyResponse)
def update_policy(
    policy_id: UUID,
    data: InsurancePolicyUpdate,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.UPDATE)),
):
    service = InsuranceService(db)
    return raise_for_error(service.update_policy(policy_id, data))


@router.delete("/{policy_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_policy(
    policy_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.DELETE)),
):
    service = InsuranceService(db)
    if not service.delete_policy(policy_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Insurance policy not found")


# --- Verification workflow ---

@router.patch("/{policy_id}/verify", response_model=InsurancePolicyResponse)
def verify_policy(
    policy_id: UUID,
    db: DbSession,
    actor: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.APPROVE)),
):
    service = InsuranceService(db)
    return raise_for_error(service.verify(policy_id, verifier_id=UUID(actor.sub)))


@router.patch("/{policy_id}/reject", response_model=InsurancePolicyResponse)
def reject_policy(
    policy_id: UUID,
    data: RejectPolicyRequest,
    db: DbSession,
    actor: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.REJECT)),
):
    service = InsuranceService(db)
    return raise_for_error(service.reject(policy_id, verifier_id=UUID(actor.sub), reason=data.reason))


@router.patch("/{policy_id}/request-update", response_model=InsurancePolicyResponse)
def request_policy_update(
    policy_id: UUID,
    data: RequestUpdateRequest,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.REJECT)),
):
    service = InsuranceService(db)
    return raise_for_error(service.request_update(policy_id, reason=data.reason))


@router.patch("/{policy_id}/notify", response_model=InsurancePolicyResponse)
def mark_policy_notified(
    policy_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.UPDATE)),
):
    """Record that an expiry reminder was sent for this policy."""
    service = InsuranceService(db)
    return raise_for_error(service.mark_notified(policy_id))


# --- Documents ---

@router.post("/{policy_id}/documents", response_model=InsurancePolicyResponse)
def attach_document(
    policy_id: UUID,
    data: AttachDocumentRequest,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.UPDATE)),
):
    service = InsuranceService(db)
    return raise_for_error(service.attach_document(policy_id, data.document_id, data.document_type))


@router.post("/{policy_id}/documents/upload", response_model=InsurancePolicyResponse)
def upload_policy_document(
    policy_id: UUID,
    db: DbSession,
    actor: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.UPDATE)),
    document: UploadFile = File(..., description="Policy document, certificate or endorsement"),
    document_type: PolicyDocumentType = Form(PolicyDocumentType.POLICY_DOCUMENT),
):
    service = InsuranceService(db)
    return raise_for_error(
        service.upload_document(policy_id, document, document_type.value, uploaded_by=UUID(actor.sub))
    )


@router.patch("/{policy_id}/docusign", response_model=InsurancePolicyResponse)
def link_docusign(
    policy_id: UUID,
    data: LinkDocuSignRequest,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.INSURANCE, Action.UPDATE)),
):
    service = InsuranceService(db)
    return raise_for_error(service.link_docusign(policy_id, data.docusign_envelope_id, data.document_id))
