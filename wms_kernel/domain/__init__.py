"""
Pure domain layer of the WMS kernel.

Zero I/O.  Value objects, result types, the clock abstraction and workflow
definitions live here; nothing in this package imports from ``db`` or
``selectors``.
"""

from wms_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from wms_kernel.domain.result import DomainError, ErrorKind, Result
from wms_kernel.domain.values import Money, Quantity
from wms_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "DeterministicClock",
    "DomainError",
    "ErrorKind",
    "Guard",
    "Money",
    "Quantity",
    "Result",
    "SystemClock",
    "Transition",
    "Workflow",
]
