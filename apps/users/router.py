from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from apps.users.schemas import UserCreate, UserUpdate, UserResponse
from apps.users.services import (
    get_users, get_technicians, get_user_or_404, create_user, update_user, delete_user
)
from core.database import get_db

router = APIRouter()

@router.get("/", response_model=List[UserResponse], summary="Get all users")
def list_users(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return get_users(db, skip=skip, limit=limit)

@router.get(
    "/technicians",
    response_model=List[UserResponse],
    summary="Get technicians",
    description="Active users with the technician or admin role, for job assignment"
)
def list_technicians(db: Session = Depends(get_db)):
    return get_technicians(db)

@router.get("/{user_id}", response_model=UserResponse, summary="Get a specific user")
def get_specific_user(user_id: int, db: Session = Depends(get_db)):
    return get_user_or_404(db, user_id)

@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED, summary="Create a user")
def create_new_user(user: UserCreate, db: Session = Depends(get_db)):
    return create_user(db, user)

@router.put("/{user_id}", response_model=UserResponse, summary="Update a user")
def update_existing_user(user_id: int, user: UserUpdate, db: Session = Depends(get_db)):
    return update_user(db, user_id, user)

@router.delete("/{user_id}", summary="Delete a user")
def delete_existing_user(user_id: int, db: Session = Depends(get_db)):
    return delete_user(db, user_id)
