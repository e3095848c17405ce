"""Small helpers shared across the curriculum stages."""

from .fields import list_field, split_fields, unique_in_order

__all__ = ["list_field", "split_fields", "unique_in_order"]
