"""Persistence adapters for forces."""

from .json_store import JsonForceRepository

__all__ = ["JsonForceRepository"]
