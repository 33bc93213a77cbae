from .models import Page
from .repository import ContentRepository

__all__ = ["ContentRepository", "Page"]
