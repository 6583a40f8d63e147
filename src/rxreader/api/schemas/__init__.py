"""
API schemas package.
"""

from .common import ApiResponse
from .prescription import ApiTestResponse, ErrorResponse, PrescriptionAnalysisResponse

__all__ = [
    "ApiResponse",
    "ApiTestResponse",
    "ErrorResponse",
    "PrescriptionAnalysisResponse",
]
