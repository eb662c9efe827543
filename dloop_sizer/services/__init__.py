"""Service modules"""
from .sizing_service import SizingService

__all__ = ["SizingService"]
