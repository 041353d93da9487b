"""
Pydantic models for API request/response validation.
Auto-generates OpenAPI documentation.
"""

from pydantic import BaseModel, Field, StrictStr
from typing import Any


class SaveReportRequest(BaseModel):
    """Report save request, as posted by the designer."""
    fileName: StrictStr = Field(..., min_length=1)
    reportContent: StrictStr = Field(..., min_length=1)


class SaveReportResponse(BaseModel):
    """Report save confirmation."""
    message: str = "Report saved successfully"
    fileName: str


class LicenseResponse(BaseModel):
    """Designer/viewer license key."""
    key: str = ""


class ComplianceRow(BaseModel):
    """One row of the unified compliances dataset."""
    Category: str
    ItemName: Any = None
    LicenseDetail: Any = None
    expiryDate: Any = None
    remarks: Any = None


class HealthResponse(BaseModel):
    """API health check response."""
    service: str
    version: str
    status: str
    database: str


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str
