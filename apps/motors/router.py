from fastapi import APIRouter, Depends, status, Query
from typing import Optional

from apps.motors.schemas import MotorCreate, MotorUpdate, MotorResponse, MotorListResponse
from apps.motors.services import MotorService, get_motor_service

router = APIRouter()

@router.get(
    "/",
    response_model=MotorListResponse,
    summary="Get all motors",
    description="List motors with their owning company"
)
def get_motors(
    search: Optional[str] = Query(None, description="Search in tag, manufacturer, model or serial number"),
    motor_type: Optional[str] = Query(None, alias="type", description="Filter by motor type"),
    company_id: Optional[int] = Query(None, description="Only motors owned by this company"),
    service: MotorService = Depends(get_motor_service)
):
    motors = service.get_motors(search=search, motor_type=motor_type, company_id=company_id)
    return MotorListResponse(items=motors, total=len(motors))

@router.get("/{motor_id}", response_model=MotorResponse, summary="Get motor by ID")
def get_motor(
    motor_id: int,
    service: MotorService = Depends(get_motor_service)
):
    return service.motor_to_response(service.get_motor_or_404(motor_id))

@router.post(
    "/",
    response_model=MotorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a motor"
)
def create_motor(
    motor: MotorCreate,
    service: MotorService = Depends(get_motor_service)
):
    return service.motor_to_response(service.create_motor(motor))

@router.put("/{motor_id}", response_model=MotorResponse, summary="Update motor")
def update_motor(
    motor_id: int,
    motor_update: MotorUpdate,
    service: MotorService = Depends(get_motor_service)
):
    return service.motor_to_response(service.update_motor(motor_id, motor_update))

@router.delete("/{motor_id}", summary="Delete motor")
def delete_motor(
    motor_id: int,
    service: MotorService = Depends(get_motor_service)
):
    service.delete_motor(motor_id)
    return {"message": "Motor deleted successfully"}
