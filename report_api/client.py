"""
Client for the Compliance Report Server.

Useful for scripts that export report definitions or pull the
report datasets without going through the designer.
"""

import requests
from typing import Dict, List

from .models import ComplianceRow


class ReportServerClient:
    """
    Client for the report server JSON API.

    Usage:
        client = ReportServerClient("http://localhost:3000")
        client.save_report("monthly", open("monthly.mrt").read())
        data = client.get_data()
    """

    def __init__(self, api_url: str = "http://localhost:3000"):
        """
        Initialize API client.

        Args:
            api_url: Base URL of the report server
        """
        self.api_url = api_url.rstrip('/')
        self.session = requests.Session()

    def _get(self, endpoint: str, params: Dict = None):
        """Make GET request to API."""
        url = f"{self.api_url}{endpoint}"
        response = self.session.get(url, params=params)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, payload: Dict):
        """Make POST request with a JSON body."""
        url = f"{self.api_url}{endpoint}"
        response = self.session.post(url, json=payload)
        response.raise_for_status()
        return response.json()

    # ----------------------------------------------------------------
    # Health & License
    # ----------------------------------------------------------------

    def health_check(self) -> Dict:
        """Check API health and database reachability."""
        return self._get("/api/health")

    def get_license(self) -> str:
        """Get the designer/viewer license key (empty string if unset)."""
        return self._get("/api/license").get("key", "")

    # ----------------------------------------------------------------
    # Reports
    # ----------------------------------------------------------------

    def list_reports(self) -> List[str]:
        """Get saved report file names."""
        return self._get("/api/reports")

    def save_report(self, file_name: str, content: str) -> str:
        """
        Save a report definition.

        Args:
            file_name: Report name; the server appends '.mrt' if missing
            content: Report definition text

        Returns:
            File name the server stored the report under
        """
        result = self._post(
            "/api/save-report",
            {"fileName": file_name, "reportContent": content},
        )
        return result["fileName"]

    # ----------------------------------------------------------------
    # Datasets
    # ----------------------------------------------------------------

    def get_data(self) -> Dict[str, List[Dict]]:
        """Get every dataset, keyed by dataset name."""
        return self._get("/api/data")

    def get_dataset(self, name: str) -> List[Dict]:
        """
        Get the rows of one dataset.

        Args:
            name: Dataset name (e.g. 'CEMS', 'Compliances')

        Raises:
            KeyError: If the server does not return that dataset
        """
        return self.get_data()[name]

    def get_compliances(self) -> List[ComplianceRow]:
        """Get the unified compliance rows as typed records."""
        return [ComplianceRow(**row) for row in self.get_dataset("Compliances")]


if __name__ == "__main__":
    client = ReportServerClient()

    print("=" * 60)
    print("Report Server Client Example")
    print("=" * 60)

    print("\n1. Health check:")
    print(client.health_check())

    print("\n2. Saved reports:")
    for name in client.list_reports():
        print(f"   {name}")

    print("\n3. Dataset sizes:")
    for name, rows in client.get_data().items():
        print(f"   {name:<20} {len(rows)} rows")

    print("\n4. Compliance items:")
    for row in client.get_compliances()[:10]:
        print(f"   [{row.Category}] {row.ItemName} expires {row.expiryDate}")
