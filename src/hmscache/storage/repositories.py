"""
SQLite record stores.

``SqliteStore`` implements the ``Store`` protocol for any entity type. The
SQL that differs between entities (columns, joins, searchable expressions,
default order, row conversion) lives in a ``TableMapping``; one mapping is
defined here for each record type.

Search is a case-insensitive ``LIKE '%term%'`` over the mapping's search
expressions, ordered newest first. For patients a purely numeric term is
treated as an id lookup; every other record type matches digits as text.
Wildcards typed by the user (``%`` and ``_``) match literally.

Rows can also be listed by a foreign key (``find_by_reference``), and
``visit_history`` reads a patient's visits joined with the treating doctor.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Generic, TypeVar

from ..core.types import (
    Appointment,
    Doctor,
    EntityKind,
    MedicalInventory,
    Patient,
    PatientFeedback,
    Prescription,
    VisitHistory,
)
from ..utils.error_handling import CONSTRAINT_SUGGESTIONS, StoreError
from .database import HospitalDatabase

T = TypeVar("T")


def _to_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _to_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _to_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    return Decimal(str(value))


def _iso(value: date | datetime | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    return value.isoformat()


@dataclass(frozen=True)
class TableMapping(Generic[T]):
    """
    SQL shape of one entity type.

    Attributes:
        entity: Label used in errors
        table: Table written by insert/update/delete
        columns: Select list, may reference joined tables
        from_clause: FROM clause including joins
        id_column: Qualified primary key used in lookups
        search_columns: Expressions matched with LIKE
        order_by: Default result order
        write_columns: Columns written by insert/update, in ``to_row`` order
        to_row: Entity -> values for ``write_columns``
        from_row: Result row -> entity
        numeric_id_lookup: Treat an all-digit term as an id lookup
        references: Foreign keys usable with ``find_by_reference``, name -> column
    """

    entity: str
    table: str
    columns: str
    from_clause: str
    id_column: str
    search_columns: tuple[str, ...]
    order_by: str
    write_columns: tuple[str, ...]
    to_row: Callable[[T], tuple[Any, ...]]
    from_row: Callable[[sqlite3.Row], T]
    numeric_id_lookup: bool = False
    references: dict[str, str] = field(default_factory=dict)

    @property
    def select(self) -> str:
        return f"SELECT {self.columns} FROM {self.from_clause}"


class SqliteStore(Generic[T]):
    """``Store`` implementation over a ``HospitalDatabase``."""

    def __init__(self, database: HospitalDatabase, mapping: TableMapping[T]):
        self.database = database
        self.mapping = mapping

    def find_by_id(self, entity_id: int) -> T | None:
        sql = f"{self.mapping.select} WHERE {self.mapping.id_column} = ?"
        rows = self._query("find_by_id", sql, (entity_id,))
        return self.mapping.from_row(rows[0]) if rows else None

    def search(self, term: str, limit: int, offset: int) -> list[T]:
        term = (term or "").strip()
        if self._is_id_term(term):
            entity = self.find_by_id(int(term))
            if entity is None or offset > 0 or limit == 0:
                return []
            return [entity]

        where, params = self._where(term)
        sql = f"{self.mapping.select}{where} ORDER BY {self.mapping.order_by} LIMIT ? OFFSET ?"
        rows = self._query("search", sql, (*params, limit, offset))
        return [self.mapping.from_row(row) for row in rows]

    def count(self, term: str) -> int:
        term = (term or "").strip()
        if self._is_id_term(term):
            return 0 if self.find_by_id(int(term)) is None else 1

        where, params = self._where(term)
        sql = f"SELECT COUNT(*) FROM {self.mapping.from_clause}{where}"
        rows = self._query("count", sql, params)
        return int(rows[0][0])

    def find_by_reference(self, reference: str, ref_id: int) -> list[T]:
        """
        Every row whose ``reference`` foreign key equals ``ref_id``, in default order.

        Args:
            reference: Key of ``mapping.references``, e.g. "patient" or "doctor"
            ref_id: Id of the referenced record

        Raises:
            ValueError: If the mapping has no such reference
        """
        column = self.mapping.references.get(reference)
        if column is None:
            raise ValueError(
                f"{self.mapping.entity} has no {reference!r} reference "
                f"(available: {', '.join(sorted(self.mapping.references)) or 'none'})"
            )
        sql = f"{self.mapping.select} WHERE {column} = ? ORDER BY {self.mapping.order_by}"
        rows = self._query(f"find_by_{reference}", sql, (ref_id,))
        return [self.mapping.from_row(row) for row in rows]

    def insert(self, entity: T) -> int:
        columns = self.mapping.write_columns
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {self.mapping.table} ({', '.join(columns)}) VALUES ({placeholders})"
        cursor = self._write("insert", sql, self.mapping.to_row(entity))
        new_id = cursor.lastrowid
        if new_id is None:
            raise StoreError(
                f"Insert into {self.mapping.table} returned no id",
                operation="insert",
                entity=self.mapping.entity,
            )
        return int(new_id)

    def update(self, entity: T) -> None:
        entity_id = getattr(entity, "id", None)
        if entity_id is None:
            raise StoreError(
                f"Cannot update {self.mapping.entity} without an id",
                operation="update",
                entity=self.mapping.entity,
                suggestions=["Insert the record first, or load it to get its id"],
            )
        assignments = ", ".join(f"{column} = ?" for column in self.mapping.write_columns)
        sql = f"UPDATE {self.mapping.table} SET {assignments} WHERE ID = ?"
        self._write("update", sql, (*self.mapping.to_row(entity), entity_id))

    def delete(self, entity_id: int) -> None:
        self._write("delete", f"DELETE FROM {self.mapping.table} WHERE ID = ?", (entity_id,))

    def _is_id_term(self, term: str) -> bool:
        return self.mapping.numeric_id_lookup and term.isdigit()

    def _where(self, term: str) -> tuple[str, tuple[str, ...]]:
        if not term:
            return "", ()
        clauses = " OR ".join(
            f"{column} LIKE ? ESCAPE '\\'" for column in self.mapping.search_columns
        )
        pattern = like_pattern(term)
        return f" WHERE ({clauses})", tuple(pattern for _ in self.mapping.search_columns)

    def _query(self, operation: str, sql: str, params: tuple[Any, ...]) -> list[sqlite3.Row]:
        try:
            return self.database.execute(sql, params)
        except sqlite3.Error as e:
            raise _store_error(self.mapping.entity, operation, e) from e

    def _write(self, operation: str, sql: str, params: tuple[Any, ...]) -> sqlite3.Cursor:
        try:
            with self.database.transaction() as conn:
                return conn.execute(sql, params)
        except sqlite3.Error as e:
            raise _store_error(self.mapping.entity, operation, e) from e


def like_pattern(term: str) -> str:
    """``%term%`` with LIKE wildcards in ``term`` escaped by backslash."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _store_error(entity: str, operation: str, error: sqlite3.Error) -> StoreError:
    return StoreError(
        f"{entity} {operation} failed: {error}",
        operation=operation,
        entity=entity,
        suggestions=(
            list(CONSTRAINT_SUGGESTIONS) if isinstance(error, sqlite3.IntegrityError) else None
        ),
    )


def visit_history(database: HospitalDatabase, patient_id: int) -> list[VisitHistory]:
    """
    Past and upcoming visits of one patient, newest first.

    Read straight from the appointment table on every call; visits change
    with every booking, so they are never cached.
    """
    sql = (
        "SELECT d.FirstName || ' ' || d.LastName AS DoctorName, a.AppointmentDate, a.Reason "
        "FROM Appointment a JOIN Doctor d ON a.DoctorID = d.ID "
        "WHERE a.PatientID = ? ORDER BY a.AppointmentDate DESC, a.ID DESC"
    )
    try:
        rows = database.execute(sql, (patient_id,))
    except sqlite3.Error as e:
        raise _store_error("Patient", "visit_history", e) from e
    return [
        VisitHistory(
            doctor_name=row["DoctorName"],
            visit_date=_to_date(row["AppointmentDate"]),
            reason=row["Reason"],
        )
        for row in rows
    ]


# ----------------------------------------------------------------------
# Mappings
# ----------------------------------------------------------------------

_PATIENT_NAME = "p.FirstName || ' ' || COALESCE(p.MiddleName || ' ', '') || p.LastName"
_DOCTOR_NAME = "d.FirstName || ' ' || COALESCE(d.MiddleName || ' ', '') || d.LastName"

PATIENTS: TableMapping[Patient] = TableMapping(
    entity="Patient",
    table="Patient",
    columns="ID, FirstName, MiddleName, LastName, Email, PhoneNumber, DateOfBirth, Address",
    from_clause="Patient",
    id_column="ID",
    search_columns=("FirstName", "LastName", "PhoneNumber", "Email"),
    order_by="ID DESC",
    write_columns=(
        "FirstName", "MiddleName", "LastName", "Email", "PhoneNumber", "DateOfBirth", "Address",
    ),
    to_row=lambda p: (
        p.first_name, p.middle_name, p.last_name, p.email, p.phone, _iso(p.date_of_birth), p.address,
    ),
    from_row=lambda r: Patient(
        id=r["ID"],
        first_name=r["FirstName"],
        middle_name=r["MiddleName"],
        last_name=r["LastName"],
        email=r["Email"],
        phone=r["PhoneNumber"],
        date_of_birth=_to_date(r["DateOfBirth"]),
        address=r["Address"],
    ),
    numeric_id_lookup=True,
)

DOCTORS: TableMapping[Doctor] = TableMapping(
    entity="Doctor",
    table="Doctor",
    columns="ID, FirstName, MiddleName, LastName, Email, PhoneNumber, DepartmentID",
    from_clause="Doctor",
    id_column="ID",
    search_columns=("FirstName", "LastName", "PhoneNumber", "Email"),
    order_by="ID DESC",
    write_columns=("FirstName", "MiddleName", "LastName", "Email", "PhoneNumber", "DepartmentID"),
    to_row=lambda d: (d.first_name, d.middle_name, d.last_name, d.email, d.phone, d.department_id),
    from_row=lambda r: Doctor(
        id=r["ID"],
        first_name=r["FirstName"],
        middle_name=r["MiddleName"],
        last_name=r["LastName"],
        email=r["Email"],
        phone=r["PhoneNumber"],
        department_id=r["DepartmentID"],
    ),
)

APPOINTMENTS: TableMapping[Appointment] = TableMapping(
    entity="Appointment",
    table="Appointment",
    columns=(
        "a.ID, a.PatientID, a.DoctorID, a.AppointmentDate, a.Reason, "
        f"{_PATIENT_NAME} AS PatientName, {_DOCTOR_NAME} AS DoctorName"
    ),
    from_clause=(
        "Appointment a JOIN Patient p ON a.PatientID = p.ID "
        "JOIN Doctor d ON a.DoctorID = d.ID"
    ),
    id_column="a.ID",
    search_columns=(_PATIENT_NAME, _DOCTOR_NAME, "a.Reason"),
    order_by="a.AppointmentDate DESC, a.ID DESC",
    write_columns=("PatientID", "DoctorID", "AppointmentDate", "Reason"),
    to_row=lambda a: (a.patient_id, a.doctor_id, _iso(a.appointment_date), a.reason),
    from_row=lambda r: Appointment(
        id=r["ID"],
        patient_id=r["PatientID"],
        doctor_id=r["DoctorID"],
        appointment_date=_to_datetime(r["AppointmentDate"]),
        reason=r["Reason"],
        patient_name=r["PatientName"],
        doctor_name=r["DoctorName"],
    ),
    references={"patient": "a.PatientID", "doctor": "a.DoctorID"},
)

PRESCRIPTIONS: TableMapping[Prescription] = TableMapping(
    entity="Prescription",
    table="Prescription",
    columns=(
        "rx.ID, rx.PatientID, rx.DoctorID, rx.PrescriptionDate, rx.Notes, "
        f"{_PATIENT_NAME} AS PatientName, {_DOCTOR_NAME} AS DoctorName"
    ),
    from_clause=(
        "Prescription rx LEFT JOIN Patient p ON rx.PatientID = p.ID "
        "LEFT JOIN Doctor d ON rx.DoctorID = d.ID"
    ),
    id_column="rx.ID",
    search_columns=(_PATIENT_NAME, _DOCTOR_NAME),
    order_by="rx.PrescriptionDate DESC, rx.ID DESC",
    write_columns=("PatientID", "DoctorID", "PrescriptionDate", "Notes"),
    to_row=lambda rx: (rx.patient_id, rx.doctor_id, _iso(rx.prescription_date), rx.notes),
    from_row=lambda r: Prescription(
        id=r["ID"],
        patient_id=r["PatientID"],
        doctor_id=r["DoctorID"],
        prescription_date=_to_date(r["PrescriptionDate"]),
        notes=r["Notes"],
        patient_name=r["PatientName"],
        doctor_name=r["DoctorName"],
    ),
    references={"patient": "rx.PatientID", "doctor": "rx.DoctorID"},
)

INVENTORY: TableMapping[MedicalInventory] = TableMapping(
    entity="MedicalInventory",
    table="MedicalInventory",
    columns="ID, Name, Type, Quantity, Unit, ExpiryDate, Cost",
    from_clause="MedicalInventory",
    id_column="ID",
    search_columns=("Name", "Type"),
    order_by="ID DESC",
    write_columns=("Name", "Type", "Quantity", "Unit", "ExpiryDate", "Cost"),
    to_row=lambda i: (
        i.name,
        i.type,
        i.quantity,
        i.unit,
        _iso(i.expiry_date),
        None if i.cost is None else str(i.cost),
    ),
    from_row=lambda r: MedicalInventory(
        id=r["ID"],
        name=r["Name"],
        type=r["Type"],
        quantity=r["Quantity"],
        unit=r["Unit"],
        expiry_date=_to_date(r["ExpiryDate"]),
        cost=_to_decimal(r["Cost"]),
    ),
)

FEEDBACK: TableMapping[PatientFeedback] = TableMapping(
    entity="PatientFeedback",
    table="PatientFeedback",
    columns=(
        "f.ID, f.PatientID, f.DoctorID, f.Rating, f.Comments, f.FeedbackDate, "
        f"{_PATIENT_NAME} AS PatientName, {_DOCTOR_NAME} AS DoctorName"
    ),
    from_clause=(
        "PatientFeedback f JOIN Patient p ON f.PatientID = p.ID "
        "JOIN Doctor d ON f.DoctorID = d.ID"
    ),
    id_column="f.ID",
    search_columns=(_PATIENT_NAME, _DOCTOR_NAME),
    order_by="f.FeedbackDate DESC, f.ID DESC",
    write_columns=("PatientID", "DoctorID", "Rating", "Comments", "FeedbackDate"),
    to_row=lambda f: (f.patient_id, f.doctor_id, f.rating, f.comments, _iso(f.feedback_date)),
    from_row=lambda r: PatientFeedback(
        id=r["ID"],
        patient_id=r["PatientID"],
        doctor_id=r["DoctorID"],
        rating=r["Rating"],
        comments=r["Comments"],
        feedback_date=_to_datetime(r["FeedbackDate"]),
        patient_name=r["PatientName"],
        doctor_name=r["DoctorName"],
    ),
    references={"patient": "f.PatientID", "doctor": "f.DoctorID"},
)

MAPPINGS: dict[EntityKind, TableMapping[Any]] = {
    EntityKind.PATIENT: PATIENTS,
    EntityKind.DOCTOR: DOCTORS,
    EntityKind.APPOINTMENT: APPOINTMENTS,
    EntityKind.PRESCRIPTION: PRESCRIPTIONS,
    EntityKind.INVENTORY: INVENTORY,
    EntityKind.FEEDBACK: FEEDBACK,
}


def create_store(database: HospitalDatabase, kind: EntityKind) -> SqliteStore[Any]:
    """Build the SQLite store for one entity type."""
    return SqliteStore(database, MAPPINGS[kind])
