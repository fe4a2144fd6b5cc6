import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from navaspurthi.api.schemas import StatsResponse, StatusUpdate
from navaspurthi.api.security import require_admin
from navaspurthi.services import registration_service
from navaspurthi.services.registration_validator import RejectionReason, ValidationResult
from navaspurthi.utils.exceptions import InvalidStatusTransitionError, RegistrationNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/registrations", tags=["registrations"])

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def _read_payload(request: Request) -> Optional[Dict[str, Any]]:
    """JSON body or form fields as a dict; None if the body can't be parsed."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


def _result_response(result: ValidationResult) -> JSONResponse:
    if result:
        return JSONResponse(status_code=status.HTTP_201_CREATED, content=result.to_dict())
    if result.reason is None:
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=result.to_dict())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result.to_dict())


@router.post("")
async def create_registration(request: Request):
    payload = await _read_payload(request)
    if payload is None:
        return _result_response(
            ValidationResult.rejected(RejectionReason.INVALID_FIELD_VALUE, "Request body must be a JSON object")
        )

    result = await run_in_threadpool(registration_service.submit_registration, payload)
    return _result_response(result)


@router.get("")
def list_registrations(
    email: Optional[str] = None,
    registration_id: Optional[str] = None,
    event: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    registrations = registration_service.list_registrations(
        email=email,
        registration_id=registration_id,
        event=event,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return {
        "registrations": [r.to_dict() for r in registrations],
        "count": len(registrations),
        "limit": limit,
        "offset": offset,
    }


@router.get("/stats", response_model=StatsResponse)
def registration_stats(_: bool = Depends(require_admin)):
    return registration_service.get_registration_stats()


@router.get("/export")
def export_registrations(
    event: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    _: bool = Depends(require_admin),
):
    csv_text = registration_service.export_registrations_csv(status=status_filter, event=event)
    filename = f"navaspurthi-registrations-{datetime.now():%Y%m%d-%H%M%S}.csv"
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{registration_id}")
def get_registration(registration_id: str):
    try:
        registration = registration_service.get_registration(registration_id)
    except RegistrationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Registration not found")
    return {"registration": registration.to_dict()}


@router.patch("/{registration_id}/status")
def update_status(registration_id: str, body: StatusUpdate, _: bool = Depends(require_admin)):
    try:
        registration = registration_service.update_registration_status(registration_id, body.status)
    except RegistrationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Registration not found")
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except (IOError, TimeoutError) as e:
        logger.error(f"Status update failed for {registration_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update status")
    return {"registration": registration.to_dict()}


@router.delete("/{registration_id}")
def delete_registration(registration_id: str, _: bool = Depends(require_admin)):
    try:
        deleted, message = registration_service.delete_registration(registration_id)
    except (IOError, TimeoutError) as e:
        logger.error(f"Delete failed for {registration_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete registration")
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)
    return {"success": True, "message": message}
