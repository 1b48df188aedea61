"""
MockPrep - Interview Practice Evaluation Engine

Runs timed mock interview sessions, scores every response against a
type-specific rubric, and tracks how a candidate improves over time.
"""

__version__ = "0.1.0"
__author__ = "MockPrep Team"
