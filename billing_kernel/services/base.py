"""
BaseService -- write-side services share one rule: flush, never commit.

The caller (``session_scope()`` in scripts, the fixture in tests) owns the
transaction, so everything a run writes commits or rolls back together.
Reads belong in ``billing_kernel.selectors``.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from billing_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):

    def __init__(self, session: Session):
        self.session = session
