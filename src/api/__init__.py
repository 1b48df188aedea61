"""
API layer for MockPrep

Contains FastAPI routers for:
- Practice session management
- Evaluation reports and performance history
- Question catalog metadata
"""

from src.api.router import api_router

__all__ = ["api_router"]
