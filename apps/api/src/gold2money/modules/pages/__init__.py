"""Server-handled HTML pages."""

from gold2money.modules.pages.router import router

__all__ = ["router"]
