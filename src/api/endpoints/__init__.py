"""
API endpoint modules for MockPrep
"""

from src.api.endpoints import interview, report, metadata

__all__ = ["interview", "report", "metadata"]
