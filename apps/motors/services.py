from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional, Dict
from fastapi import HTTPException, status, Depends
import logging

from apps.motors.models import Motor
from apps.motors.schemas import MotorCreate, MotorUpdate
from apps.companies.models import Company
from core.database import get_db
from core.forms import apply_changes

logger = logging.getLogger(__name__)

class MotorService:
    def __init__(self, db: Session):
        self.db = db

    def get_motor(self, motor_id: int) -> Optional[Motor]:
        """Get motor by ID"""
        return self.db.query(Motor).filter(Motor.id == motor_id).first()

    def get_motor_or_404(self, motor_id: int) -> Motor:
        motor = self.get_motor(motor_id)
        if not motor:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Motor not found"
            )
        return motor

    def get_motors(
        self,
        search: Optional[str] = None,
        motor_type: Optional[str] = None,
        company_id: Optional[int] = None
    ) -> List[Dict]:
        """List motors ordered by shop tag"""
        query = self.db.query(Motor).options(joinedload(Motor.company))

        if search:
            query = query.filter(or_(
                Motor.motor_id.ilike(f"%{search}%"),
                Motor.manufacturer.ilike(f"%{search}%"),
                Motor.model.ilike(f"%{search}%"),
                Motor.serial_number.ilike(f"%{search}%")
            ))

        if motor_type:
            query = query.filter(Motor.type == motor_type)

        if company_id is not None:
            query = query.filter(Motor.company_id == company_id)

        return [self.motor_to_response(m) for m in query.order_by(Motor.motor_id).all()]

    def _ensure_company(self, company_id: int) -> None:
        exists = self.db.query(Company.id).filter(Company.id == company_id).first()
        if not exists:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Company {company_id} does not exist"
            )

    def create_motor(self, motor_data: MotorCreate) -> Motor:
        self._ensure_company(motor_data.company_id)

        db_motor = Motor(**motor_data.model_dump())
        try:
            self.db.add(db_motor)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to create motor {motor_data.motor_id}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create motor"
            )
        self.db.refresh(db_motor)

        logger.info(f"Created motor: {db_motor.motor_id} for company {db_motor.company_id}")
        return db_motor

    def update_motor(self, motor_id: int, motor_update: MotorUpdate) -> Motor:
        db_motor = self.get_motor_or_404(motor_id)

        update_data = motor_update.model_dump(exclude_unset=True)
        if update_data.get("company_id") is not None:
            self._ensure_company(update_data["company_id"])

        apply_changes(db_motor, update_data)
        self.db.commit()
        self.db.refresh(db_motor)

        logger.info(f"Updated motor: {db_motor.motor_id} (ID: {db_motor.id})")
        return db_motor

    def delete_motor(self, motor_id: int) -> bool:
        db_motor = self.get_motor_or_404(motor_id)

        self.db.delete(db_motor)
        self.db.commit()

        logger.info(f"Deleted motor: {db_motor.motor_id} (ID: {motor_id})")
        return True

    def motor_to_response(self, motor: Motor) -> Dict:
        """Convert Motor model to response dictionary"""
        return {
            "id": motor.id,
            "motor_id": motor.motor_id,
            "company_id": motor.company_id,
            "company_name": motor.company.name if motor.company else None,
            "manufacturer": motor.manufacturer,
            "model": motor.model,
            "serial_number": motor.serial_number,
            "type": motor.type,
            "horsepower": motor.horsepower,
            "voltage": motor.voltage,
            "rpm": motor.rpm,
            "notes": motor.notes,
            "created_at": motor.created_at,
            "updated_at": motor.updated_at
        }

# Dependency injection
def get_motor_service(db: Session = Depends(get_db)) -> MotorService:
    return MotorService(db)
