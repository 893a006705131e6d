"""
WMS Kernel

The shared core of the warehouse system:
- Result-returning domain operations (no exceptions for business rules)
- Decimal-only value objects for quantities and money
- Workflow state machine definitions
- Append-only persistence for audit records
- Structured JSON logging
"""

__version__ = "0.1.0"
