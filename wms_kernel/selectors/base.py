"""
Module: wms_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.  Selectors
    form the "Q" side of the CQRS-lite pattern, providing structured read access
    to warehouse data without mutation capability.
Architecture position: Kernel > Selectors.  May import from db/base.py.
    MUST NOT import from services or outer layers.

Invariants enforced:
    - Read-only access: selectors MUST NOT call session.add(), session.delete(),
      session.commit(), or session.flush().
    - DTO return convention: selectors return frozen dataclasses, NOT ORM
      instances.
    - Session ownership: the caller owns the session and its transaction scope.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from wms_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs or computed results.

    Non-goals:
        - Does NOT define any query methods; subclasses implement them.
    """

    def __init__(self, session: Session):
        self.session = session
