"""Prescription domain entities produced by the response extractor.

The record keeps the model's decoded object verbatim: no field is
normalized, filled in or dropped. Only the ``medicines`` container shape is
guaranteed (always a list).
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

MEDICINE_FIELDS = ("name", "dosage", "frequency", "duration", "instructions")


@dataclass(frozen=True)
class MedicineEntry:
    """One medicine line of a prescription."""

    name: str
    dosage: str
    frequency: str
    duration: str
    instructions: str

    @classmethod
    def from_mapping(cls, data: Any) -> "MedicineEntry":
        """Build an entry, raising ValueError unless every field is a string."""
        if not isinstance(data, Mapping):
            raise ValueError(f"medicine entry must be an object, got {type(data).__name__}")
        values = {}
        for name in MEDICINE_FIELDS:
            value = data.get(name)
            if not isinstance(value, str):
                raise ValueError(f"medicine field '{name}' must be a string")
            values[name] = value
        return cls(**values)


@dataclass(frozen=True)
class PrescriptionRecord:
    """Structured prescription data decoded from one model response."""

    payload: Dict[str, Any] = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.payload.get("medicines"), list):
            raise ValueError("PrescriptionRecord requires a 'medicines' list")

    @property
    def medicines(self) -> List[Any]:
        return copy.deepcopy(self.payload["medicines"])

    @property
    def doctor_name(self) -> Optional[Any]:
        return self.payload.get("doctorName")

    @property
    def patient_name(self) -> Optional[Any]:
        return self.payload.get("patientName")

    @property
    def date(self) -> Optional[Any]:
        return self.payload.get("date")

    @property
    def medicine_count(self) -> int:
        return len(self.payload["medicines"])

    def to_dict(self) -> Dict[str, Any]:
        """Wire-format copy of the record."""
        return copy.deepcopy(self.payload)
