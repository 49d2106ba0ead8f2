"""
Record validation.

Each validator checks one record type and raises ValidationError naming the
offending field. Validators never modify the record.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from ..core.types import (
    Appointment,
    Doctor,
    MedicalInventory,
    Patient,
    PatientFeedback,
    Prescription,
)
from ..utils.error_handling import ValidationError

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
MIN_PHONE_LENGTH = 7
MAX_REASON_LENGTH = 255
MIN_RATING = 1
MAX_RATING = 5


def _require(value: Any, field: str, label: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{label} is required", field=field)


def _check_contact(phone: str | None, email: str | None) -> None:
    _require(phone, "phone", "Phone number")
    if len(phone.strip()) < MIN_PHONE_LENGTH:  # type: ignore[union-attr]
        raise ValidationError(
            f"Phone number must be at least {MIN_PHONE_LENGTH} characters", field="phone"
        )
    _require(email, "email", "Email")
    if not EMAIL_PATTERN.match(email.strip()):  # type: ignore[union-attr]
        raise ValidationError(f"Invalid email address: {email}", field="email")


def validate_patient(patient: Patient) -> None:
    _require(patient.first_name, "first_name", "First name")
    _require(patient.last_name, "last_name", "Last name")
    _check_contact(patient.phone, patient.email)
    _require(patient.date_of_birth, "date_of_birth", "Date of birth")


def validate_doctor(doctor: Doctor) -> None:
    _require(doctor.first_name, "first_name", "First name")
    _require(doctor.last_name, "last_name", "Last name")
    _check_contact(doctor.phone, doctor.email)


def validate_appointment(appointment: Appointment, today: date | None = None) -> None:
    """
    Validate an appointment.

    Args:
        appointment: Record to check
        today: Reference date for the "not in the past" rule (defaults to date.today())
    """
    if not appointment.patient_id or appointment.patient_id <= 0:
        raise ValidationError("A valid patient must be selected", field="patient_id")
    if not appointment.doctor_id or appointment.doctor_id <= 0:
        raise ValidationError("A valid doctor must be selected", field="doctor_id")
    _require(appointment.appointment_date, "appointment_date", "Appointment date")

    when = appointment.appointment_date
    day = when.date() if isinstance(when, datetime) else when
    if day < (today or date.today()):  # type: ignore[operator]
        raise ValidationError("Appointment date cannot be in the past", field="appointment_date")

    _require(appointment.reason, "reason", "Reason")
    if len(appointment.reason) > MAX_REASON_LENGTH:  # type: ignore[arg-type]
        raise ValidationError(
            f"Reason must be at most {MAX_REASON_LENGTH} characters", field="reason"
        )


def validate_prescription(prescription: Prescription) -> None:
    _require(prescription.patient_id, "patient_id", "Patient")
    _require(prescription.doctor_id, "doctor_id", "Doctor")
    _require(prescription.prescription_date, "prescription_date", "Prescription date")


def validate_inventory(item: MedicalInventory) -> None:
    _require(item.name, "name", "Name")
    _require(item.quantity, "quantity", "Quantity")
    if item.quantity < 0:  # type: ignore[operator]
        raise ValidationError("Quantity cannot be negative", field="quantity")
    if item.cost is not None and item.cost < 0:
        raise ValidationError("Cost cannot be negative", field="cost")


def validate_feedback(feedback: PatientFeedback) -> None:
    _require(feedback.patient_id, "patient_id", "Patient")
    _require(feedback.doctor_id, "doctor_id", "Doctor")
    if feedback.rating is not None and not MIN_RATING <= feedback.rating <= MAX_RATING:
        raise ValidationError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}", field="rating"
        )


def appointment_validator(today: Callable[[], date]) -> Callable[[Appointment], None]:
    """Bind ``validate_appointment`` to a date source."""

    def validate(appointment: Appointment) -> None:
        validate_appointment(appointment, today=today())

    return validate
