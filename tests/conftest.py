"""Shared fixtures for the test suite."""

import dataclasses

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

from report_api.config import Settings
from report_api.main import create_app


SCHEMA_SQL = [
    "CREATE TABLE CEMS (id INTEGER PRIMARY KEY, parameter TEXT, value REAL, recordedAt TEXT)",
    "CREATE TABLE clinical_waste_track (id INTEGER PRIMARY KEY, wasteType TEXT, weightKg REAL)",
    "CREATE TABLE drivers_compliance (id INTEGER PRIMARY KEY, driverName TEXT, licenseType TEXT, expiryDate TEXT, remarks TEXT)",
    "CREATE TABLE Idle_Downtime (id INTEGER PRIMARY KEY, machine TEXT, hours REAL)",
    "CREATE TABLE parameter_limits (id INTEGER PRIMARY KEY, parameter TEXT, minValue REAL, maxValue REAL)",
    "CREATE TABLE statutory_compliance (id INTEGER PRIMARY KEY, equipment TEXT, licenseNo TEXT, expiryDate TEXT, remarks TEXT)",
    "CREATE TABLE Testing_KIP (id INTEGER PRIMARY KEY, testName TEXT, result TEXT)",
    "CREATE TABLE transport_compliance (id INTEGER PRIMARY KEY, vehicleNo TEXT, licenseType TEXT, expiryDate TEXT, remarks TEXT)",
    "CREATE TABLE users (id INTEGER PRIMARY KEY, username TEXT, role TEXT)",
    "CREATE TABLE Waste_Treated (id INTEGER PRIMARY KEY, treatedOn TEXT, weightKg REAL)",
]

SEED_SQL = [
    "INSERT INTO CEMS (parameter, value, recordedAt) VALUES ('SO2', 41.5, '2025-01-01T08:00:00'), ('NOx', 12.0, '2025-01-01T08:00:00')",
    "INSERT INTO clinical_waste_track (wasteType, weightKg) VALUES ('Yellow bag', 120.5)",
    "INSERT INTO drivers_compliance (driverName, licenseType, expiryDate, remarks) VALUES ('Ali', 'GDL', '2025-06-30', 'ok'), ('Siti', 'PSV', '2024-12-31', 'renew')",
    "INSERT INTO Idle_Downtime (machine, hours) VALUES ('Incinerator 1', 3.5)",
    "INSERT INTO parameter_limits (parameter, minValue, maxValue) VALUES ('SO2', 0, 50)",
    "INSERT INTO statutory_compliance (equipment, licenseNo, expiryDate, remarks) VALUES ('Boiler', 'JKKP-001', '2025-03-01', NULL)",
    "INSERT INTO Testing_KIP (testName, result) VALUES ('Stack test', 'pass')",
    "INSERT INTO transport_compliance (vehicleNo, licenseType, expiryDate, remarks) VALUES ('WXY 1234', 'APAD', '2025-09-15', 'ok')",
    "INSERT INTO users (username, role) VALUES ('admin', 'administrator'), ('viewer', 'readonly')",
]

# Waste_Treated has no rows.
ROW_COUNTS = {
    "CEMS": 2,
    "ClinicalWaste": 1,
    "DriversCompliance": 2,
    "IdleDowntime": 1,
    "ParameterLimits": 1,
    "StatutoryCompliance": 1,
    "TestingKIP": 1,
    "TransportCompliance": 1,
    "Users": 2,
    "WasteTreated": 0,
    "Compliances": 4,
}


@pytest.fixture
def db_url(tmp_path):
    """URL of a real SQLite DB in tmp_path holding the seeded compliance tables."""
    url = f"sqlite:///{tmp_path / 'compliance.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        for stmt in SCHEMA_SQL + SEED_SQL:
            conn.execute(text(stmt))
    engine.dispose()
    return url


@pytest.fixture
def empty_db_url(tmp_path):
    """URL of a reachable SQLite DB with none of the compliance tables."""
    return f"sqlite:///{tmp_path / 'empty.db'}"


@pytest.fixture
def public_dir(tmp_path):
    """Public asset directory with the designer and viewer pages."""
    public = tmp_path / "public"
    public.mkdir()
    (public / "designer.html").write_text("<html><body>designer</body></html>", encoding="utf-8")
    (public / "viewer.html").write_text("<html><body>viewer</body></html>", encoding="utf-8")
    return public


@pytest.fixture
def settings(tmp_path, public_dir, db_url):
    """Settings pointing every path and the database into tmp_path."""
    lib = tmp_path / "stimulsoft"
    lib.mkdir()
    (lib / "stimulsoft.reports.js").write_text("/* lib */", encoding="utf-8")
    return Settings(
        database_url=db_url,
        public_dir=public_dir,
        reports_dir=public_dir / "reports",
        stimulsoft_dir=lib,
    )


@pytest.fixture
def make_client(settings):
    """Factory: build an app from the test settings, with overrides."""
    def _make(provider=None, store=None, **overrides):
        app = create_app(dataclasses.replace(settings, **overrides), provider=provider, store=store)
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client):
    """Started test client backed by the seeded database."""
    with make_client() as c:
        yield c


@pytest.fixture
def row_counts():
    """Rows per dataset in the seeded database."""
    return dict(ROW_COUNTS)
