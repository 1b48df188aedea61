"""
Core business logic modules for MockPrep

Contains:
- Question Bank: Catalog, allocation and search
- Session Manager: State machine for the session lifecycle
- Evaluation Engine: Per-response rubric scoring
- Session Aggregator: Session scores and feedback
- Performance Tracker: Cross-session history and trends
- AI Reasoning: Advisory oracle calls with static fallbacks
"""

from src.core.ai_reasoning import AIReasoningLayer
from src.core.evaluation_engine import ResponseEvaluator
from src.core.performance_tracker import PerformanceTracker
from src.core.question_bank import QuestionBank
from src.core.session_aggregator import SessionAggregator
from src.core.session_manager import SessionManager

__all__ = [
    "AIReasoningLayer",
    "ResponseEvaluator",
    "PerformanceTracker",
    "QuestionBank",
    "SessionAggregator",
    "SessionManager",
]
