from fastapi import APIRouter, Depends, status, Query
from typing import Optional

from apps.companies.models import CompanyStatus
from apps.companies.schemas import (
    CompanyCreate, CompanyUpdate, CompanyResponse, CompanyListResponse
)
from apps.companies.services import CompanyService, get_company_service

router = APIRouter()

@router.get(
    "/",
    response_model=CompanyListResponse,
    summary="Get all companies",
    description="List customer companies ordered by name"
)
def get_companies(
    search: Optional[str] = Query(None, description="Search in name, contact name or email"),
    status_filter: Optional[CompanyStatus] = Query(None, alias="status", description="Filter by status"),
    service: CompanyService = Depends(get_company_service)
):
    companies = service.get_companies(search=search, status_filter=status_filter)
    return CompanyListResponse(items=companies, total=len(companies))

@router.get(
    "/{company_id}",
    response_model=CompanyResponse,
    summary="Get company by ID"
)
def get_company(
    company_id: int,
    service: CompanyService = Depends(get_company_service)
):
    company = service.get_company_or_404(company_id)
    return service.company_to_response(company)

@router.post(
    "/",
    response_model=CompanyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new company"
)
def create_company(
    company: CompanyCreate,
    service: CompanyService = Depends(get_company_service)
):
    db_company = service.create_company(company)
    return service.company_to_response(db_company, 0, 0)

@router.put(
    "/{company_id}",
    response_model=CompanyResponse,
    summary="Update company"
)
def update_company(
    company_id: int,
    company_update: CompanyUpdate,
    service: CompanyService = Depends(get_company_service)
):
    company = service.update_company(company_id, company_update)
    return service.company_to_response(company)

@router.delete(
    "/{company_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete company",
    description="Delete a company and its motors. Refused while jobs, invoices or warranties reference it."
)
def delete_company(
    company_id: int,
    service: CompanyService = Depends(get_company_service)
):
    service.delete_company(company_id)
    return {"message": "Company deleted successfully"}
