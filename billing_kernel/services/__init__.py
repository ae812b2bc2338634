"""Kernel services -- write side of the persistence layer (flush-only)."""

from billing_kernel.services.base import BaseService
from billing_kernel.services.invoice_writer import InvoiceWriter

__all__ = ["BaseService", "InvoiceWriter"]
