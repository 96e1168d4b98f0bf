"""X12 EDI codec and clearinghouse transport for eligibility, claim status and claims."""

__version__ = "1.0.0"
