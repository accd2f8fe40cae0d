from sqlalchemy.orm import Session
from fastapi import Depends, HTTPException, status
import logging

from apps.users.models import User, TECHNICIAN_ROLES
from apps.users.schemas import UserCreate, UserUpdate
from core.database import get_db
from core.forms import apply_changes

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()

def get_user_or_404(db: Session, user_id: int):
    db_user = get_user(db, user_id)
    if not db_user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with ID {user_id} not found"
        )
    return db_user

def get_users(db: Session, skip: int = 0, limit: int = 100):
    return db.query(User).order_by(User.name).offset(skip).limit(limit).all()

def get_technicians(db: Session):
    """Active users who can be assigned to a job"""
    return db.query(User).filter(
        User.role.in_(TECHNICIAN_ROLES),
        User.is_active.is_(True)
    ).order_by(User.name).all()

def create_user(db: Session, user: UserCreate):
    # Check if email already exists
    if get_user_by_email(db, user.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"User with email '{user.email}' already exists"
        )

    db_user = User(**user.model_dump())
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"Created user {db_user.email} with role {db_user.role.value}")
    return db_user

def update_user(db: Session, user_id: int, user: UserUpdate):
    db_user = get_user_or_404(db, user_id)

    # Check if new email conflicts with existing user
    if user.email and user.email != db_user.email:
        if get_user_by_email(db, user.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"User with email '{user.email}' already exists"
            )

    apply_changes(db_user, user.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(db_user)
    logger.info(f"Updated user {db_user.email}")
    return db_user

def delete_user(db: Session, user_id: int):
    """Delete a user; jobs assigned to them become unassigned"""
    db_user = get_user_or_404(db, user_id)

    db.delete(db_user)
    db.commit()
    logger.info(f"Deleted user {db_user.email}")
    return {"message": f"User '{db_user.name}' deleted successfully"}
