"""
Data access layer for the compliance database.
Provides read-only access through a pooled SQLAlchemy engine.
"""

from typing import Dict, List

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url


# Logical dataset name -> source table. Key order is the response order.
DATASETS: Dict[str, str] = {
    "CEMS": "CEMS",
    "ClinicalWaste": "clinical_waste_track",
    "DriversCompliance": "drivers_compliance",
    "IdleDowntime": "Idle_Downtime",
    "ParameterLimits": "parameter_limits",
    "StatutoryCompliance": "statutory_compliance",
    "TestingKIP": "Testing_KIP",
    "TransportCompliance": "transport_compliance",
    "Users": "users",
    "WasteTreated": "Waste_Treated",
}

COMPLIANCES_KEY = "Compliances"

COMPLIANCE_CATEGORIES = ("Driver", "Statutory", "Transport")

COMPLIANCE_COLUMNS = ("Category", "ItemName", "LicenseDetail", "expiryDate", "remarks")

# Stacks the three compliance tables into one common shape.
COMPLIANCES_SQL = """
    SELECT
        'Driver' AS Category,
        driverName AS ItemName,
        licenseType AS LicenseDetail,
        expiryDate,
        remarks
    FROM drivers_compliance

    UNION ALL

    SELECT
        'Statutory' AS Category,
        equipment AS ItemName,
        licenseNo AS LicenseDetail,
        expiryDate,
        remarks
    FROM statutory_compliance

    UNION ALL

    SELECT
        'Transport' AS Category,
        vehicleNo AS ItemName,
        licenseType AS LicenseDetail,
        expiryDate,
        remarks
    FROM transport_compliance
"""


class ComplianceDataProvider:
    """
    Provides report datasets from the compliance database.
    Thread-safe: every call checks a connection out of the shared pool.
    """

    def __init__(self, url, pool_size: int = 5, timeout: int = 30):
        """
        Create the connection pool. No connection is opened until first use.

        Args:
            url: SQLAlchemy URL (string or ``sqlalchemy.engine.URL``)
            pool_size: Pooled connections kept open
            timeout: Driver login/connect timeout in seconds
        """
        url = make_url(url)
        kwargs = {"pool_pre_ping": True}
        if url.get_backend_name() == "sqlite":
            # Pooled connections are handed to FastAPI worker threads
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs["pool_size"] = pool_size
            if url.get_driver_name() == "pymssql":
                kwargs["connect_args"] = {"login_timeout": timeout}

        self.engine = create_engine(url, **kwargs)

    @classmethod
    def from_settings(cls, settings) -> "ComplianceDataProvider":
        """Build a provider from a ``Settings`` value."""
        return cls(
            settings.sqlalchemy_url(),
            pool_size=settings.db_pool_size,
            timeout=settings.db_timeout,
        )

    @property
    def url(self) -> str:
        """Connection URL with the password masked."""
        return self.engine.url.render_as_string(hide_password=True)

    def ping(self) -> None:
        """Round-trip a trivial query; raises if the database is unreachable."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def close(self):
        """Close all pooled connections."""
        self.engine.dispose()

    # ----------------------------------------------------------------
    # Generic query
    # ----------------------------------------------------------------

    def query(self, sql: str, params: dict = None) -> List[dict]:
        """Execute a raw SQL query and return results as list of dicts."""
        with self.engine.connect() as conn:
            return self._fetch(conn, sql, params)

    @staticmethod
    def _fetch(conn, sql: str, params: dict = None) -> List[dict]:
        result = conn.execute(text(sql), params or {})
        return [dict(row._mapping) for row in result]

    # ----------------------------------------------------------------
    # Report datasets
    # ----------------------------------------------------------------

    def get_table(self, name: str) -> List[dict]:
        """
        Get every row of one logical dataset.

        Args:
            name: Dataset key from ``DATASETS`` (e.g. 'CEMS', 'Users')

        Returns:
            Rows as returned by the driver, in database order
        """
        if name == COMPLIANCES_KEY:
            return self.get_compliances()
        table = DATASETS[name]
        return self.query(f"SELECT * FROM {table}")

    def get_compliances(self) -> List[dict]:
        """Get the unified driver/statutory/transport compliance rows."""
        return self.query(COMPLIANCES_SQL)

    def get_dataset(self) -> Dict[str, List[dict]]:
        """
        Run the full query battery for the report designer.

        Issues one full scan per table in ``DATASETS`` plus the unified
        compliances query, all on one pooled connection. Any failure
        propagates; partial results are discarded.

        Returns:
            Mapping of dataset name to row list, ``Compliances`` first
        """
        with self.engine.connect() as conn:
            tables = {
                key: self._fetch(conn, f"SELECT * FROM {table}")
                for key, table in DATASETS.items()
            }
            compliances = self._fetch(conn, COMPLIANCES_SQL)

        dataset = {COMPLIANCES_KEY: compliances}
        dataset.update(tables)
        return dataset
