"""
AI Interviewer Prompt Templates

Prompts for the interviewer side of a mock session:
- Follow-up questions that dig into an answer
- Questions personalized to a candidate profile
"""

from src.models.question import CandidateProfile, Question, QuestionDifficulty


class InterviewerPrompts:
    """Prompt templates for generating interview questions."""

    SYSTEM_CONTEXT = """You are an experienced interviewer running a realistic mock interview.

Guidelines:
- Ask one clear question at a time
- Build on what the candidate actually said
- Prefer questions about real experience over trivia
- Match the requested difficulty

Always answer with JSON only.
"""

    def follow_up_prompt(
        self,
        question: Question,
        response_text: str,
        role: str | None = None,
    ) -> str:
        """
        Build the follow-up question prompt.

        Args:
            question: Original question
            response_text: Candidate's answer to it
            role: Target role, if the session has one

        Returns:
            Prompt string
        """
        return f"""{self.SYSTEM_CONTEXT}

You are conducting a {role or "technical"} interview.

Original Question: "{question.text}"
Question Type: {question.type.value}
Difficulty: {question.difficulty.value}

Candidate's Response: "{response_text}"

Based on the candidate's response, generate 2-3 relevant follow-up questions that:
1. Dig deeper into their experience
2. Test their understanding of concepts mentioned
3. Explore practical applications or challenges they've faced

Format your response as JSON:
{{
  "follow_up_questions": [
    {{
      "question": "Follow-up question text",
      "purpose": "Why this question is relevant",
      "difficulty": "easy|medium|hard"
    }}
  ],
  "response_quality": "brief assessment of the response quality",
  "suggested_areas": ["areas to explore further"]
}}
"""

    def personalization_prompt(
        self,
        profile: CandidateProfile,
        role: str,
        difficulty: QuestionDifficulty,
        count: int = 5,
    ) -> str:
        """Build the prompt for questions tailored to a candidate profile."""
        skills = ", ".join(profile.skills) or "Not specified"
        previous_roles = ", ".join(profile.previous_roles) or "Not specified"

        return f"""{self.SYSTEM_CONTEXT}

Generate personalized interview questions based on this candidate profile:

Role: {role}
Experience Level: {profile.experience_level or "Not specified"}
Skills: {skills}
Previous Roles: {previous_roles}
Industry: {profile.industry or "Not specified"}
Difficulty: {difficulty.value}

Generate {count} questions that are specifically tailored to their background.
Focus on their actual experience and skills mentioned.

Format as JSON:
{{
  "questions": [
    {{
      "question": "Question text",
      "type": "technical|behavioral|situational",
      "difficulty": "easy|medium|hard",
      "reasoning": "Why this question is relevant to their profile",
      "evaluation_criteria": ["what to look for in their response"]
    }}
  ]
}}
"""
