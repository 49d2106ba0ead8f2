"""
SQLite database for the hospital records.

This module provides the HospitalDatabase class that owns the SQLite
connection and creates the schema. Record-level access lives in
``repositories``.

Classes:
    HospitalDatabase: Connection management and schema creation

Features:
    - Lazily opened connection with ``sqlite3.Row`` rows
    - Foreign keys enforced
    - Transaction context manager that commits or rolls back
    - Every sqlite3 failure surfaces as StoreError
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from ..utils.error_handling import StoreError
from ..utils.logging_config import get_logger

logger = get_logger()

MEMORY = ":memory:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS Department (
    ID           INTEGER PRIMARY KEY AUTOINCREMENT,
    Name         VARCHAR(100) NOT NULL,
    PhoneNumber  VARCHAR(15),
    CONSTRAINT uq_department_name UNIQUE (Name)
);

CREATE TABLE IF NOT EXISTS Doctor (
    ID            INTEGER PRIMARY KEY AUTOINCREMENT,
    FirstName     VARCHAR(50) NOT NULL,
    MiddleName    VARCHAR(50),
    LastName      VARCHAR(50) NOT NULL,
    Email         VARCHAR(100) NOT NULL,
    PhoneNumber   VARCHAR(15),
    DepartmentID  INTEGER,
    CONSTRAINT uq_doctor_email UNIQUE (Email),
    CONSTRAINT uq_doctor_phone UNIQUE (PhoneNumber),
    CONSTRAINT fk_doctor_department FOREIGN KEY (DepartmentID) REFERENCES Department(ID)
);

CREATE TABLE IF NOT EXISTS Patient (
    ID                INTEGER PRIMARY KEY AUTOINCREMENT,
    FirstName         VARCHAR(50) NOT NULL,
    MiddleName        VARCHAR(50),
    LastName          VARCHAR(50) NOT NULL,
    Email             VARCHAR(100) NOT NULL,
    PhoneNumber       VARCHAR(15),
    DateOfBirth       DATE,
    Address           VARCHAR(255),
    RegistrationDate  TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    CONSTRAINT uq_patient_email UNIQUE (Email),
    CONSTRAINT uq_patient_phone UNIQUE (PhoneNumber)
);

CREATE TABLE IF NOT EXISTS Appointment (
    ID               INTEGER PRIMARY KEY AUTOINCREMENT,
    PatientID        INTEGER NOT NULL,
    DoctorID         INTEGER NOT NULL,
    AppointmentDate  DATETIME NOT NULL,
    Reason           VARCHAR(255),
    CONSTRAINT uq_appt_patient_doctor_datetime UNIQUE (PatientID, DoctorID, AppointmentDate),
    CONSTRAINT fk_appt_patient FOREIGN KEY (PatientID) REFERENCES Patient(ID),
    CONSTRAINT fk_appt_doctor FOREIGN KEY (DoctorID) REFERENCES Doctor(ID)
);

CREATE TABLE IF NOT EXISTS Prescription (
    ID                INTEGER PRIMARY KEY AUTOINCREMENT,
    PatientID         INTEGER NOT NULL,
    DoctorID          INTEGER NOT NULL,
    PrescriptionDate  DATE NOT NULL,
    Notes             TEXT,
    CONSTRAINT fk_rx_patient FOREIGN KEY (PatientID) REFERENCES Patient(ID),
    CONSTRAINT fk_rx_doctor FOREIGN KEY (DoctorID) REFERENCES Doctor(ID)
);

CREATE TABLE IF NOT EXISTS MedicalInventory (
    ID          INTEGER PRIMARY KEY AUTOINCREMENT,
    Name        VARCHAR(100) NOT NULL,
    Type        VARCHAR(100),
    Quantity    INTEGER,
    Unit        VARCHAR(20),
    ExpiryDate  DATE,
    Cost        TEXT,
    CONSTRAINT uq_inventory_name UNIQUE (Name)
);

CREATE TABLE IF NOT EXISTS PatientFeedback (
    ID            INTEGER PRIMARY KEY AUTOINCREMENT,
    PatientID     INTEGER NOT NULL,
    DoctorID      INTEGER NOT NULL,
    Rating        INTEGER,
    Comments      TEXT,
    FeedbackDate  TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    CONSTRAINT uq_feedback_patient_doctor_date UNIQUE (PatientID, DoctorID, FeedbackDate),
    CONSTRAINT fk_feedback_patient FOREIGN KEY (PatientID) REFERENCES Patient(ID),
    CONSTRAINT fk_feedback_doctor FOREIGN KEY (DoctorID) REFERENCES Doctor(ID)
);

CREATE INDEX IF NOT EXISTS idx_patient_last_name ON Patient (LastName);
CREATE INDEX IF NOT EXISTS idx_doctor_last_name ON Doctor (LastName);
CREATE INDEX IF NOT EXISTS idx_appointment_date ON Appointment (AppointmentDate);
CREATE INDEX IF NOT EXISTS idx_prescription_date ON Prescription (PrescriptionDate);
CREATE INDEX IF NOT EXISTS idx_feedback_date ON PatientFeedback (FeedbackDate);
"""


class HospitalDatabase:
    """
    SQLite-backed hospital records database.

    One connection is shared by every store built on this database. The
    connection is opened on first use.
    """

    def __init__(self, db_path: Path | str = MEMORY) -> None:
        self.db_path = str(db_path)
        if self.db_path != MEMORY:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            try:
                conn = sqlite3.connect(self.db_path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA foreign_keys = ON")
            except sqlite3.Error as e:
                raise StoreError(
                    f"Cannot open database {self.db_path}: {e}", operation="connect"
                ) from e
            self._connection = conn
        return self._connection

    def initialize(self) -> None:
        """Create tables and indexes if they do not exist."""
        try:
            self.connection.executescript(SCHEMA)
            self.connection.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Schema creation failed: {e}", operation="initialize") from e
        logger.info(f"Hospital database initialized: {self.db_path}")

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield the connection; commit on success, roll back on any error."""
        conn = self.connection
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        else:
            conn.commit()

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        """Run a read query and return all rows."""
        return self.connection.execute(sql, params).fetchall()

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> HospitalDatabase:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
