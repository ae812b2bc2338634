"""Billing kernel domain layer: pure value objects and DTOs, zero I/O."""
