from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional

from apps.warranties.models import WarrantyStatus
from apps.warranties.schemas import (
    WarrantyCreate, WarrantyUpdate, WarrantyExtension, WarrantyClaim, WarrantyClaimDecision,
    WarrantyResponse, WarrantyListResponse, WarrantySummaryResponse
)
from apps.warranties.services import WarrantyService, get_warranty_service

router = APIRouter()

# ============ STATIC ROUTES FIRST (before /{warranty_id}) ============

@router.get(
    "/expiring",
    response_model=List[WarrantyResponse],
    summary="Expiring warranties",
    description="Active or extended warranties ending within 30 days"
)
def get_expiring_warranties(service: WarrantyService = Depends(get_warranty_service)):
    return service.get_expiring()

@router.get("/stats/summary", response_model=WarrantySummaryResponse, summary="Warranty summary")
def get_warranty_summary(service: WarrantyService = Depends(get_warranty_service)):
    return WarrantySummaryResponse(**service.get_summary())

@router.get("/", response_model=WarrantyListResponse, summary="Get all warranties")
def get_warranties(
    search: Optional[str] = Query(None, description="Search in work description, company, motor tag, job number"),
    status_filter: Optional[WarrantyStatus] = Query(None, alias="status", description="Filter by status"),
    company_id: Optional[int] = Query(None, description="Only warranties for this company"),
    service: WarrantyService = Depends(get_warranty_service)
):
    warranties = service.get_warranties(search=search, status_filter=status_filter, company_id=company_id)
    return WarrantyListResponse(items=warranties, total=len(warranties))

@router.post(
    "/",
    response_model=WarrantyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a warranty",
    description="Open a warranty for a job. The end date is the start date plus the period in months."
)
def create_warranty(
    warranty: WarrantyCreate,
    service: WarrantyService = Depends(get_warranty_service)
):
    return service.warranty_to_response(service.create_warranty(warranty))

# ============ DYNAMIC ROUTES ============

@router.get("/{warranty_id}", response_model=WarrantyResponse, summary="Get warranty by ID")
def get_warranty(
    warranty_id: int,
    service: WarrantyService = Depends(get_warranty_service)
):
    return service.warranty_to_response(service.get_warranty_or_404(warranty_id))

@router.put("/{warranty_id}", response_model=WarrantyResponse, summary="Update warranty")
def update_warranty(
    warranty_id: int,
    warranty_update: WarrantyUpdate,
    service: WarrantyService = Depends(get_warranty_service)
):
    return service.warranty_to_response(service.update_warranty(warranty_id, warranty_update))

@router.post(
    "/{warranty_id}/extend",
    response_model=WarrantyResponse,
    summary="Extend warranty",
    description="Add whole months to the current end date. The first extension records the original end date."
)
def extend_warranty(
    warranty_id: int,
    extension: WarrantyExtension,
    service: WarrantyService = Depends(get_warranty_service)
):
    return service.warranty_to_response(service.extend_warranty(warranty_id, extension))

@router.post("/{warranty_id}/claim", response_model=WarrantyResponse, summary="File a warranty claim")
def file_claim(
    warranty_id: int,
    claim: Optional[WarrantyClaim] = None,
    service: WarrantyService = Depends(get_warranty_service)
):
    return service.warranty_to_response(service.file_claim(warranty_id, claim or WarrantyClaim()))

@router.post(
    "/{warranty_id}/claim/decision",
    response_model=WarrantyResponse,
    summary="Approve or deny a pending claim"
)
def decide_claim(
    warranty_id: int,
    decision: WarrantyClaimDecision,
    service: WarrantyService = Depends(get_warranty_service)
):
    return service.warranty_to_response(service.decide_claim(warranty_id, decision))

@router.delete("/{warranty_id}", summary="Delete warranty")
def delete_warranty(
    warranty_id: int,
    service: WarrantyService = Depends(get_warranty_service)
):
    service.delete_warranty(warranty_id)
    return {"message": "Warranty deleted successfully"}
