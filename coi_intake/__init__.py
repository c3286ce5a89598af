"""Certificate of Insurance intake.

Extracts structured fields from text recovered from scanned insurance
certificates and resolves the insured party to an employee roster,
producing proposals for a human operator to confirm.
"""

__version__ = "1.0.0"
