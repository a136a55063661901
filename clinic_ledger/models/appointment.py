import enum
from sqlalchemy import Column, Integer, ForeignKey, Numeric, Enum, Index
from sqlalchemy.orm import relationship
from clinic_ledger.core.database import Base
from clinic_ledger.models.base import TimestampMixin, enum_values


class AppointmentType(str, enum.Enum):
    TELEMEDICINE = "telemedicine"
    IN_PERSON = "in-person"


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    BOOKED = "booked"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Appointment(Base, TimestampMixin):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    patient_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    provider_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    appointment_type = Column(
        Enum(AppointmentType, name="appointmenttype", values_callable=enum_values),
        nullable=False,
    )
    status = Column(
        Enum(AppointmentStatus, name="appointmentstatus", values_callable=enum_values),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )
    appointment_fee = Column(Numeric(12, 2), default=0, nullable=False)

    ledger_entries = relationship("LedgerEntry", back_populates="appointment")


Index("ix_appointments_status", Appointment.status)
