"""Models module for the storefront.

This module contains the common database models shared by every feature of
the store. It includes a TimestampMixin class that provides created_at and
updated_at fields, as well as a utility function for generating KSUIDs
(K-Sortable Unique IDentifiers) used as public identifiers."""

from tortoise import fields, models
from ksuid import ksuid


def generate_ksuid():
    """Generate a K-Sortable Unique IDentifier (KSUID).

    KSUIDs are time-ordered, URL-safe and sortable chronologically, which
    makes them suitable as the public identifiers reported back to callers.

    Returns:
        str: A string representation of the generated KSUID.
    """
    return str(ksuid.Ksuid())


class TimestampMixin(models.Model):
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        abstract = True
