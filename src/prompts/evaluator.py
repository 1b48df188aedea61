"""
AI Evaluator Prompt Templates

Prompts asking the oracle to judge a candidate response or coach a
response in progress. Every prompt ends with the JSON schema the parser
in the AI reasoning layer expects.
"""

from src.models.question import Question


class EvaluatorPrompts:
    """
    Prompt templates for qualitative response analysis.

    The oracle's opinion is advisory: rubric scores are computed locally,
    so these prompts ask for feedback text and a 1-10 impression only.
    """

    SYSTEM_CONTEXT = """You are an experienced interview coach reviewing a mock interview answer.

Your role:
- Judge how completely the answer addresses the question
- Point out what the candidate did well
- Name the most important gaps
- Give concrete advice the candidate can apply in the next answer

Be encouraging but honest. Always answer with JSON only.
"""

    def analysis_prompt(self, question: Question, response_text: str) -> str:
        """
        Build the response analysis prompt.

        Args:
            question: The question that was answered
            response_text: Candidate's answer

        Returns:
            Prompt string
        """
        criteria = ", ".join(question.evaluation_criteria) or "General assessment"
        return f"""{self.SYSTEM_CONTEXT}

Analyze this interview response for quality and completeness.

Question: "{question.text}"
Type: {question.type.value}
Difficulty: {question.difficulty.value}
Expected Criteria: {criteria}

Response: "{response_text}"

Provide analysis in JSON format:
{{
  "score": 1-10,
  "strengths": ["what the candidate did well"],
  "weaknesses": ["areas for improvement"],
  "suggestions": ["specific advice for better responses"],
  "completeness": "how well they addressed the question",
  "clarity": "how clear and structured their response was",
  "examples": "quality of examples provided (if any)"
}}
"""

    def coaching_prompt(
        self,
        question: Question | None,
        response_text: str,
        question_number: int,
        total_questions: int,
        elapsed_seconds: float,
    ) -> str:
        """Build the real-time coaching prompt for a response in progress."""
        question_type = question.type.value if question else "unknown"
        return f"""{self.SYSTEM_CONTEXT}

Provide real-time interview coaching based on this session data:

Current Question Type: {question_type}
Response So Far: "{response_text}"
Session Progress: {question_number}/{total_questions}
Time Elapsed: {int(elapsed_seconds)} seconds

Provide coaching in JSON format:
{{
  "encouragement": "positive reinforcement message",
  "suggestions": ["immediate tips for improving current response"],
  "time_management": "advice about pacing",
  "next_steps": "what to focus on for remaining questions"
}}
"""
