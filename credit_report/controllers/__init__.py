"""FastAPI routers acting as controllers in the MVC architecture."""

from . import chat, reports

__all__ = ["chat", "reports"]
