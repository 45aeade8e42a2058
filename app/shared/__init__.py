"""Shared building blocks used across features."""

from app.shared.models import LoadAuditMixin

__all__ = ["LoadAuditMixin"]
