from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import Optional
import math

from apps.jobs.schemas import (
    JobCreate, JobUpdate, JobResponse, JobStatusUpdate, JobListResponse, JobStatsResponse
)
from apps.jobs.services import JobService, get_job_service
from apps.jobs.models import JobStatus, JobPriority

router = APIRouter()

# ============ STATIC ROUTES FIRST (before /{job_id}) ============

@router.get(
    "/stats/summary",
    response_model=JobStatsResponse,
    summary="Get job statistics",
    description="Job counts per status plus overdue and due-soon counts"
)
def get_job_stats(service: JobService = Depends(get_job_service)):
    return JobStatsResponse(**service.get_job_stats())

@router.get(
    "/number/{job_number}",
    response_model=JobResponse,
    summary="Get job by job number",
    description="Retrieve a specific job by its job number, e.g. JOB-2025-014"
)
def get_job_by_number(
    job_number: str,
    service: JobService = Depends(get_job_service)
):
    job = service.get_job_by_number(job_number)
    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found"
        )
    return service.job_to_response(job)

# ============ CRUD ROUTES ============

@router.post(
    "/",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new job",
    description="Open a repair job for a company's motor. The job number and estimate are assigned by the server."
)
def create_job(
    job: JobCreate,
    service: JobService = Depends(get_job_service)
):
    return service.job_to_response(service.create_job(job))

@router.get(
    "/",
    response_model=JobListResponse,
    summary="Get all jobs",
    description="Retrieve jobs with filtering and pagination"
)
def get_jobs(
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Number of items to return"),
    status_filter: Optional[JobStatus] = Query(None, alias="status", description="Filter by status"),
    priority: Optional[JobPriority] = Query(None, description="Filter by priority"),
    search: Optional[str] = Query(None, description="Search in job number, description, company name"),
    company_id: Optional[int] = Query(None, description="Only jobs for this company"),
    service: JobService = Depends(get_job_service)
):
    jobs, total = service.get_jobs(
        skip=skip,
        limit=limit,
        status=status_filter,
        priority=priority,
        search=search,
        company_id=company_id
    )

    total_pages = math.ceil(total / limit) if limit > 0 else 1
    current_page = (skip // limit) + 1 if limit > 0 else 1

    return JobListResponse(
        items=jobs,
        total=total,
        page=current_page,
        size=limit,
        total_pages=total_pages
    )

# ============ DYNAMIC ROUTES (must come after static routes) ============

@router.get(
    "/{job_id}",
    response_model=JobResponse,
    summary="Get job by ID"
)
def get_job(
    job_id: int,
    service: JobService = Depends(get_job_service)
):
    return service.job_to_response(service.get_job_or_404(job_id))

@router.put(
    "/{job_id}",
    response_model=JobResponse,
    summary="Update job details",
    description="Update job information. Changing labor or parts figures recalculates the estimate."
)
def update_job(
    job_id: int,
    job_update: JobUpdate,
    service: JobService = Depends(get_job_service)
):
    return service.job_to_response(service.update_job(job_id, job_update))

@router.patch(
    "/{job_id}/status",
    response_model=JobResponse,
    summary="Update job status",
    description="Move the job along pending -> in_progress -> completed -> delivered (or under_warranty)"
)
def update_job_status(
    job_id: int,
    status_update: JobStatusUpdate,
    service: JobService = Depends(get_job_service)
):
    return service.job_to_response(service.update_job_status(job_id, status_update))

@router.delete(
    "/{job_id}",
    summary="Delete job"
)
def delete_job(
    job_id: int,
    service: JobService = Depends(get_job_service)
):
    service.delete_job(job_id)
    return {"message": "Job deleted successfully"}
