"""
Rx-Reader: prescription image reader

Accepts a photographed or scanned prescription, asks a vision-capable
language model to read it, and returns the medicines, dosages and
identities it found as validated structured data.
"""

__version__ = "0.1.0"
__author__ = "Rx-Reader Team"
__description__ = "Structured data extraction from prescription images"
