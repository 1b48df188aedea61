"""
AI prompt templates for MockPrep

Contains structured prompts for:
- Response analysis and coaching
- Follow-up and personalized question generation
"""

from src.prompts.interviewer import InterviewerPrompts
from src.prompts.evaluator import EvaluatorPrompts

__all__ = [
    "InterviewerPrompts",
    "EvaluatorPrompts",
]
