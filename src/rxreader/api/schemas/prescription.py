"""
Pydantic schemas for prescription-related API endpoints.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

SUCCESS_MESSAGE = "Prescription analyzed successfully"


class PrescriptionAnalysisResponse(BaseModel):
    """Response schema for a successfully read prescription.

    ``data`` is the model's decoded answer passed through unchanged:
    ``medicines`` (list of name/dosage/frequency/duration/instructions
    objects) plus ``doctorName``, ``patientName`` and ``date``.
    """

    success: bool = Field(True, description="Operation success status")
    message: str = Field(SUCCESS_MESSAGE, description="Status message")
    data: Dict[str, Any] = Field(..., description="Extracted prescription data")


class ApiTestResponse(BaseModel):
    """Response schema for the inference credential self-test."""

    success: bool = Field(True, description="Operation success status")
    message: str = Field(..., description="Status message")
    response: str = Field(..., description="Text returned by the model")


class ErrorResponse(BaseModel):
    """Error response schema for prescription endpoints."""

    success: bool = Field(False, description="Operation success status")
    message: str = Field(..., description="Human-readable error message")
    error: Optional[str] = Field(None, description="Diagnostic detail (non-production only)")
