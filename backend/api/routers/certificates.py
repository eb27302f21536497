"""Certificate issuance, management and verification router"""
from datetime import date
from typing import Dict, Optional, Type, TypeVar

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError as PydanticValidationError

from domain.entities.asset import AssetSource
from domain.entities.user import UserEntity
from domain.entities.verification import VerificationResult
from domain.enums import AssetSlot, CertificateStatus
from domain.exceptions import DomainError
from application.use_cases.issue_certificate import IssueCertificateInput, IssueCertificateUseCase
from application.use_cases.manage_certificate import (
    DeleteCertificateUseCase, ListCertificatesUseCase, UpdateCertificateInput, UpdateCertificateUseCase,
)
from application.use_cases.render_certificate import RenderCertificateUseCase
from application.use_cases.verify_certificate import VerifyCertificateUseCase
from api.dependencies import (
    get_registry_user, get_certificate_repository, get_issue_use_case, get_update_use_case,
    get_list_use_case, get_delete_use_case, get_render_use_case, get_verify_use_case,
)
from api.errors import to_http_exception
from api.schemas.common import ResponseBase
from api.schemas.certificate import (
    CertificateChangesRequest, CertificateCreateRequest, CertificateListResponse,
    CertificateResponse, CertificateSummary, PublicCertificateSchema, VerificationResponse,
)
from infrastructure.persistence.repositories.certificate_repository import SqlAlchemyCertificateRepository

router = APIRouter(prefix="/api/certificates", tags=["Certificates"])

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _parse_json_part(schema: Type[SchemaT], raw: str, part: str) -> SchemaT:
    try:
        return schema.model_validate_json(raw)
    except PydanticValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": ("body", part, *error["loc"])} for error in e.errors(include_url=False)]
        )


async def _collect_sources(uploads: Dict[AssetSlot, Optional[UploadFile]],
                           references: Dict[AssetSlot, str]) -> Dict[AssetSlot, AssetSource]:
    """Uploaded files first, then URL / data URI references for the remaining slots"""
    sources = {slot: AssetSource(data=ref) for slot, ref in references.items()
               if slot is not AssetSlot.EMBLEM and ref}
    for slot, upload in uploads.items():
        if upload is None:
            continue
        content = await upload.read()
        if content:
            sources[slot] = AssetSource(data=content, filename=upload.filename)
    return sources


def _verification_response(result: VerificationResult) -> VerificationResponse:
    record = PublicCertificateSchema.model_validate(result.record) if result.record else None
    return VerificationResponse(found=result.found, status=result.status.value, record=record)


# ==================== public verification ====================

@router.get("/verify/{certificate_number}", response_model=VerificationResponse)
async def verify_certificate(
    certificate_number: str,
    use_case: VerifyCertificateUseCase = Depends(get_verify_use_case),
):
    """Manual entry verification; never errors, unknown numbers are not_found"""
    return _verification_response(await use_case.execute(certificate_number))


@router.post("/verify/scan", response_model=VerificationResponse)
async def verify_scanned_code(
    image: UploadFile = File(...),
    use_case: VerifyCertificateUseCase = Depends(get_verify_use_case),
):
    """Verification from a photo of the certificate's QR code"""
    try:
        result = await use_case.execute_scan(await image.read())
    except DomainError as e:
        raise to_http_exception(e)
    return _verification_response(result)


# ==================== registry ====================

@router.post("", response_model=CertificateResponse, status_code=status.HTTP_201_CREATED)
async def issue_certificate(
    record: str = Form(..., description="CertificateCreateRequest as JSON"),
    owner_photo: Optional[UploadFile] = File(None),
    land_photo: Optional[UploadFile] = File(None),
    boundary_photo: Optional[UploadFile] = File(None),
    land_plan_image: Optional[UploadFile] = File(None),
    owner_signature: Optional[UploadFile] = File(None),
    officer_signature: Optional[UploadFile] = File(None),
    current_user: UserEntity = Depends(get_registry_user),
    use_case: IssueCertificateUseCase = Depends(get_issue_use_case),
):
    request = _parse_json_part(CertificateCreateRequest, record, "record")
    today = date.today()
    sources = await _collect_sources({
        AssetSlot.OWNER_PHOTO: owner_photo,
        AssetSlot.LAND_PHOTO: land_photo,
        AssetSlot.BOUNDARY_PHOTO: boundary_photo,
        AssetSlot.LAND_PLAN_IMAGE: land_plan_image,
        AssetSlot.OWNER_SIGNATURE: owner_signature,
        AssetSlot.OFFICER_SIGNATURE: officer_signature,
    }, request.assets)

    try:
        output = await use_case.execute(IssueCertificateInput(
            record=request.to_record(today), sources=sources,
            created_by=current_user.id, status=CertificateStatus(request.status),
        ))
    except DomainError as e:
        raise to_http_exception(e)
    return CertificateResponse.from_record(output.record, today)


@router.get("", response_model=CertificateListResponse)
async def list_certificates(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status_filter: Optional[CertificateStatus] = Query(None, alias="status"),
    current_user: UserEntity = Depends(get_registry_user),
    use_case: ListCertificatesUseCase = Depends(get_list_use_case),
):
    result = await use_case.execute(page=page, page_size=page_size, status=status_filter)
    today = date.today()
    return CertificateListResponse(
        items=[CertificateSummary.from_record(r, today) for r in result.items],
        total=result.total, page=result.page, page_size=result.page_size,
    )


@router.get("/{certificate_id}", response_model=CertificateResponse)
async def get_certificate(
    certificate_id: int,
    current_user: UserEntity = Depends(get_registry_user),
    repository: SqlAlchemyCertificateRepository = Depends(get_certificate_repository),
):
    try:
        record = await repository.get_by_id(certificate_id)
    except DomainError as e:
        raise to_http_exception(e)
    return CertificateResponse.from_record(record, date.today())


@router.put("/{certificate_id}", response_model=CertificateResponse)
async def update_certificate(
    certificate_id: int,
    changes: Optional[str] = Form(None, description="CertificateChangesRequest as JSON"),
    owner_photo: Optional[UploadFile] = File(None),
    land_photo: Optional[UploadFile] = File(None),
    boundary_photo: Optional[UploadFile] = File(None),
    land_plan_image: Optional[UploadFile] = File(None),
    owner_signature: Optional[UploadFile] = File(None),
    officer_signature: Optional[UploadFile] = File(None),
    current_user: UserEntity = Depends(get_registry_user),
    use_case: UpdateCertificateUseCase = Depends(get_update_use_case),
):
    """Edit a draft/pending certificate and/or change its status (revocation needs an administrator)"""
    request = _parse_json_part(CertificateChangesRequest, changes, "changes") if changes \
        else CertificateChangesRequest()
    sources = await _collect_sources({
        AssetSlot.OWNER_PHOTO: owner_photo,
        AssetSlot.LAND_PHOTO: land_photo,
        AssetSlot.BOUNDARY_PHOTO: boundary_photo,
        AssetSlot.LAND_PLAN_IMAGE: land_plan_image,
        AssetSlot.OWNER_SIGNATURE: owner_signature,
        AssetSlot.OFFICER_SIGNATURE: officer_signature,
    }, request.assets)

    try:
        record = await use_case.execute(UpdateCertificateInput(
            certificate_id=certificate_id, changes=request.record_changes(), sources=sources,
            status=request.status, actor=current_user,
        ))
    except DomainError as e:
        raise to_http_exception(e)
    return CertificateResponse.from_record(record, date.today())


@router.delete("/{certificate_id}", response_model=ResponseBase)
async def delete_certificate(
    certificate_id: int,
    current_user: UserEntity = Depends(get_registry_user),
    use_case: DeleteCertificateUseCase = Depends(get_delete_use_case),
):
    try:
        await use_case.execute(certificate_id)
    except DomainError as e:
        raise to_http_exception(e)
    return ResponseBase(success=True, message="Certificate deleted.")


@router.get("/{certificate_id}/artifact")
async def download_artifact(
    certificate_id: int,
    format: str = Query("pdf", pattern="^(pdf|png)$"),
    current_user: UserEntity = Depends(get_registry_user),
    use_case: RenderCertificateUseCase = Depends(get_render_use_case),
):
    """Print-ready PDF or flattened PNG, rendered from the stored record and assets"""
    try:
        rendered = await use_case.execute_by_id(certificate_id, format)
    except DomainError as e:
        raise to_http_exception(e)
    return Response(
        content=rendered.content,
        media_type=rendered.media_type,
        headers={"Content-Disposition": f'attachment; filename="{rendered.filename}"',
                 "X-Artifact-SHA256": rendered.sha256},
    )
