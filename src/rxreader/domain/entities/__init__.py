"""
Domain entities package.
"""

from .prescription import MEDICINE_FIELDS, MedicineEntry, PrescriptionRecord

__all__ = [
    "MEDICINE_FIELDS",
    "MedicineEntry",
    "PrescriptionRecord",
]
