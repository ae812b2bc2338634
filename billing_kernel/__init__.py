"""
Billing Kernel

Foundation layer for the warehouse billing engine:
- Immutable value objects (Money, Currency) and domain DTOs
- Typed, coded exception hierarchy
- Structured JSON logging
- SQLAlchemy persistence for customers, rate cards, usage and invoices
"""

__version__ = "0.1.0"
