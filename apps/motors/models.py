from core.database import Base
from sqlalchemy import Column, Integer, String, Float, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

class Motor(Base):
    __tablename__ = "motors"

    id = Column(Integer, primary_key=True, index=True)
    motor_id = Column(String(50), index=True, nullable=False)  # Shop tag, e.g. M-1042
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)

    # Nameplate data
    manufacturer = Column(String(255), nullable=True)
    model = Column(String(255), nullable=True)
    serial_number = Column(String(255), index=True, nullable=True)
    type = Column(String(100), index=True, nullable=True)  # AC induction, DC, servo, ...
    horsepower = Column(Float, nullable=True)
    voltage = Column(Integer, nullable=True)
    rpm = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    company = relationship("Company", back_populates="motors")
    # Deleting a motor leaves its jobs and warranties in place with motor_id cleared
    jobs = relationship("Job", back_populates="motor")
    warranties = relationship("Warranty", back_populates="motor")
