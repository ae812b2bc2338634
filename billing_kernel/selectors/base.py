"""
BaseSelector -- read-only queries that return frozen domain DTOs.

Selectors never add, flush or commit, and never hand ORM instances to the
engines.  The caller owns the session.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from billing_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):

    def __init__(self, session: Session):
        self.session = session
