"""
Extraction of a prescription record from free-form model output.

Models often wrap the JSON answer in prose or markdown fences. The widest
span from the first ``{`` to the last ``}`` is tried first; if that does not
parse (e.g. trailing prose contains a stray brace) a string-aware balanced
scan looks for the first complete object instead.
"""

import json
import logging
from typing import Any, Iterator, Optional, Tuple

from rxreader.domain.entities.prescription import MedicineEntry, PrescriptionRecord
from rxreader.domain.errors import ParseError, SchemaViolationError

logger = logging.getLogger("rxreader.extractor")

NO_JSON_FOUND = "No valid JSON found in response"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def _loads(text: str) -> Any:
    """Strict JSON decode: NaN and Infinity are not JSON."""
    return json.loads(text, parse_constant=_reject_constant)


def _balanced_object_end(text: str, start: int) -> Optional[int]:
    """Index of the ``}`` closing the object opened at ``start``, or None.

    Braces inside JSON strings (including escaped quotes) are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def _balanced_candidates(text: str, first: int) -> Iterator[str]:
    start = first
    while start != -1:
        end = _balanced_object_end(text, start)
        if end is not None:
            yield text[start : end + 1]
        start = text.find("{", start + 1)


def locate_json_object(raw_text: str) -> Tuple[Any, str]:
    """Find and decode the JSON object embedded in ``raw_text``.

    Returns the decoded value and the substring it came from.
    Raises ParseError when no candidate exists or none parses.
    """
    text = raw_text or ""
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last < first:
        raise ParseError(details={"parser_error": NO_JSON_FOUND})

    greedy = text[first : last + 1]
    try:
        return _loads(greedy), greedy
    except ValueError as greedy_error:
        for candidate in _balanced_candidates(text, first):
            if candidate == greedy:
                continue
            try:
                return _loads(candidate), candidate
            except ValueError:
                continue
        raise ParseError(details={"parser_error": str(greedy_error)}) from greedy_error


def extract_prescription(raw_text: str, strict: bool = False) -> PrescriptionRecord:
    """Turn raw model text into a PrescriptionRecord.

    Only the container is validated: the decoded value must be an object with
    a list under ``medicines``. With ``strict`` each medicine must also be an
    object whose five fields are strings. Content is passed through verbatim.
    """
    decoded, _ = locate_json_object(raw_text)

    if not isinstance(decoded, dict):
        raise SchemaViolationError(details={"reason": "response is not a JSON object"})

    medicines = decoded.get("medicines")
    if not isinstance(medicines, list):
        reason = "missing 'medicines'" if "medicines" not in decoded else "'medicines' is not a list"
        raise SchemaViolationError(details={"reason": reason})

    if strict:
        for index, entry in enumerate(medicines):
            try:
                MedicineEntry.from_mapping(entry)
            except ValueError as e:
                raise SchemaViolationError(details={"reason": str(e), "index": index}) from e

    logger.debug(f"Extracted prescription with {len(medicines)} medicine(s)")
    return PrescriptionRecord(payload=decoded)
