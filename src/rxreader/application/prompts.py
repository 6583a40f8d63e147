"""
Instruction prompt for prescription image analysis.

The prompt is a process-wide constant: it has no per-request inputs.
"""

FALLBACK_VALUE = "Not specified"

PRESCRIPTION_EXTRACTION_PROMPT = f"""
Analyze this prescription image and extract the following information in JSON format:

{{
  "medicines": [
    {{
      "name": "Medicine name",
      "dosage": "Dosage amount (e.g., 500mg, 10ml)",
      "frequency": "How often to take (e.g., Twice daily, Every 8 hours)",
      "duration": "How long to take (e.g., 7 days, 2 weeks)",
      "instructions": "Special instructions (e.g., Take after meals, Take on empty stomach)"
    }}
  ],
  "doctorName": "Doctor's name if visible",
  "patientName": "Patient's name if visible",
  "date": "Prescription date if visible (YYYY-MM-DD format)"
}}

Instructions:
- Extract all medicines mentioned in the prescription, in the order they appear
- Every medicine must include all five fields: name, dosage, frequency, duration, instructions
- If any field is not clearly visible or mentioned, use "{FALLBACK_VALUE}" as the value
- Focus on accuracy - only extract information that is clearly visible
- For dosage, include both strength and form (e.g., "500mg tablet", "10ml syrup")
- For frequency, be specific (e.g., "Once daily", "Twice daily", "Every 6 hours")
- For duration, extract the exact period mentioned (e.g., "7 days", "2 weeks", "1 month")
- Return ONLY the JSON object, with no explanation or other text before or after it
"""


def build_extraction_prompt() -> str:
    """Return the shared prescription extraction prompt."""
    return PRESCRIPTION_EXTRACTION_PROMPT
