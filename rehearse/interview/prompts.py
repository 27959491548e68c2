"""
Interview prompt templates and generation.

This module contains all the prompt templates used throughout the interview system,
keeping them separate from the business logic for easier maintenance and editing.
Every template returns a (system_prompt, user_prompt) pair.
"""
import re
from typing import Dict, List, Optional, Sequence, Tuple

from .models import Persona, FollowUpReason
from ..config import DOCUMENT_CONTEXT_CHARS, PREVIOUS_QUESTIONS_IN_PROMPT

PromptPair = Tuple[str, str]


class InterviewPrompts:
    """Collection of all interview-related prompts."""

    @staticmethod
    def persona_context(persona: Persona) -> str:
        """Base system prompt shared by every interviewer utterance."""
        focus = ", ".join(persona.focus_areas) or "general interviewing"
        return f"""
You are {persona.name}, a {persona.role} conducting an interview.

Your questioning style is {persona.questioning_style.value}.
Your focus areas are: {focus}.

Speak directly to the candidate as if in a live conversation.
Return ONLY what you would say out loud - no preamble, no commentary, no quotes.
        """.strip()

    @staticmethod
    def greeting(persona: Persona, co_interviewers: Sequence[Persona], position: Optional[str]) -> PromptPair:
        """Prompt for the opening greeting of the session."""
        others = " and ".join(f"{p.name}, {p.role}" for p in co_interviewers)
        lines = [
            f"Now generate YOUR greeting as {persona.name}, {persona.role}:",
            "- Greet the candidate warmly",
            "- Introduce yourself",
            f"- Mention the other interviewers: {others or 'none'}",
        ]
        if position:
            lines.append(f"- Mention the position: {position}")
        lines.append('- End with "Let\'s get started" or similar')

        user = f"""
You are starting an interview. Say your greeting directly as if you're speaking to the candidate right now.

Example format: "Hi, I'm Sarah, the Tech Lead. Thanks for joining us today. I'm joined by Mike, our Senior Developer. We'll be interviewing you for the Software Engineer position. Let's get started."

{chr(10).join(lines)}

Return ONLY your spoken greeting (2-3 sentences).
        """.strip()
        return InterviewPrompts.persona_context(persona), user

    @staticmethod
    def acknowledgment(persona: Persona,
                       question: str,
                       answer: str,
                       asked_by: Optional[Persona] = None) -> PromptPair:
        """
        Prompt for a short reaction to the candidate's last answer.

        When another interviewer asked the question, the reaction also hands
        the conversation over to this persona.
        """
        handing_over = asked_by is not None and asked_by != persona
        asker = f"{asked_by.name} asked" if handing_over else "You asked"
        lines = [
            "1. Shows you listened and understood",
            "2. Provides a quick positive reaction",
            "3. Feels conversational (not robotic)",
        ]
        if handing_over:
            lines.append(f"4. Smoothly takes over from {asked_by.name}, since you ask the next question")

        user = f"""
{asker}: "{question}"
The candidate just answered: "{answer}"

Generate a brief, natural acknowledgment (1-2 sentences) that:
{chr(10).join(lines)}

Do NOT ask a question. Return ONLY the acknowledgment text.
        """.strip()
        return InterviewPrompts.persona_context(persona), user

    @staticmethod
    def follow_up(persona: Persona, question: str, answer: str, reason: FollowUpReason) -> PromptPair:
        """Prompt for a follow-up that probes the last answer."""
        guidance = InterviewPrompts.follow_up_guidance()[reason]
        user = f"""
Original question: "{question}"
Candidate's response: "{answer}"

Reason for follow-up: {reason.value}

Generate ONE natural follow-up question that:
{guidance}

Return ONLY the follow-up question text (1-2 sentences).
        """.strip()
        return InterviewPrompts.persona_context(persona), user

    @staticmethod
    def follow_up_guidance() -> Dict[FollowUpReason, str]:
        return {
            FollowUpReason.RESPONSE_TOO_BRIEF: (
                "1. Encourages the candidate to elaborate\n"
                "2. Shows genuine interest\n"
                "3. Asks for specific examples or details\n"
                "4. Feels supportive, not interrogating"
            ),
            FollowUpReason.PROBING_DEEPER: (
                "1. Probes deeper into their answer\n"
                "2. Challenges them to think more critically\n"
                "3. Asks about edge cases or complications\n"
                "4. Maintains professional but assertive tone"
            ),
            FollowUpReason.INTERESTING_CONTENT: (
                "1. Builds on an interesting point they mentioned\n"
                "2. Shows you were listening carefully\n"
                "3. Explores that topic further\n"
                "4. Feels like a natural conversation"
            ),
        }

    @staticmethod
    def question(persona: Persona,
                 previous_questions: Sequence[str],
                 document_context: Optional[str] = None) -> PromptPair:
        """Prompt for a brand-new question scoped to the persona's focus areas."""
        system = InterviewPrompts.persona_context(persona) + f"""

Generate ONE clear, conversational interview question that:
1. Is relevant to your role and focus areas
2. Matches your questioning style ({persona.questioning_style.value})
3. Doesn't repeat previous questions
4. Takes 30-60 seconds to answer
5. Is asked directly to the candidate"""

        user = "Generate your next interview question for the candidate."
        if document_context:
            user += f"\n\nCandidate's Background:\n{document_context[:DOCUMENT_CONTEXT_CHARS]}"
        if previous_questions:
            # Every prior question is listed so nothing is repeated verbatim;
            # the most recent ones are called out for topic variety.
            recent = list(previous_questions)[-PREVIOUS_QUESTIONS_IN_PROMPT:]
            user += "\n\nPrevious questions asked (don't repeat any of them):\n" + "\n".join(previous_questions)
            user += "\n\nMost recent topics (move somewhere new):\n" + "\n".join(recent)
        return system, user

    @staticmethod
    def closing(persona: Persona) -> PromptPair:
        """Prompt for the closing remarks."""
        user = f"""
You are ending the interview. Say your closing remarks directly as if you're speaking to the candidate right now.

Example format: "Thank you for taking the time to interview with us today. We'll be getting back to you soon with the outcome of your interview and next steps. Have a great day!"

Now generate YOUR closing as {persona.name}, {persona.role}:
- Thank the candidate for their time
- Mention you'll get back to them with results and next steps
- Wish them well
- Keep it professional and warm

Return ONLY your spoken closing (2-3 sentences).
        """.strip()
        return InterviewPrompts.persona_context(persona), user

    @staticmethod
    def grading(question: str, answer: str, category: str, expected_areas: Sequence[str]) -> PromptPair:
        """Prompt asking for a JSON grade of one response."""
        system = "You are an expert interview coach evaluating a candidate's response."
        user = f"""
Question: {question}
Category: {category}
Expected areas to cover: {", ".join(expected_areas) or "general"}

Candidate's Response:
{answer}

Evaluate the response on these criteria:
1. Overall Quality (0-100): Holistic assessment
2. Confidence (0-100): How confident and self-assured the response sounds
3. Clarity (0-100): How clear and well-structured the response is
4. Relevance (0-100): How well it answers the question and covers expected areas

Provide:
- Specific strengths (3-5 points)
- Areas for improvement (3-5 points)
- Detailed feedback paragraph
- Actionable suggestions (3-5 points)

Return ONLY a JSON object with this exact structure:
{{
  "overall_grade": 85,
  "confidence_score": 80,
  "clarity_score": 90,
  "relevance_score": 85,
  "strengths": ["strength1", "strength2", "strength3"],
  "improvements": ["improvement1", "improvement2"],
  "detailed_feedback": "Detailed paragraph of feedback...",
  "suggestions": ["suggestion1", "suggestion2", "suggestion3"]
}}
        """.strip()
        return system, user

    @staticmethod
    def fallback_messages() -> Dict[str, str]:
        """Templates used when the LLM cannot produce a greeting or closing."""
        return {
            "greeting": "Hi, I'm {name}, the {role}. Thanks for joining us today.",
            "co_interviewers": "I'm joined by {others}.",
            "position": "We'll be interviewing you for the {position} position.",
            "greeting_end": "Let's get started.",
            "closing": (
                "Thank you for taking the time to interview with us today, I'm {name}. "
                "We'll be getting back to you soon with the outcome and next steps. Have a great day!"
            ),
        }


class PromptFormatter:
    """Helper class for cleaning model output and formatting spoken text."""

    META_PHRASES = (
        re.compile(r"^(Here's|Here is) (a|the|my|your) (next )?(question|greeting|follow-up|closing|acknowledgment|transition):?\s*", re.I),
        re.compile(r"^(Now,? )?(let's|let me) (ask|explore|move to|shift to|focus on):?\s*", re.I),
        re.compile(r"^(I'd like to|I would like to|I want to) (ask|know|hear about|explore):?\s*", re.I),
        re.compile(r"^(You've|I've|We've) (set|established|created).*?:\s*", re.I),
    )
    META_LINE = re.compile(r"^(Here is |Here's |This is )", re.I)
    TRAILING_AFTER_COLON = re.compile(r':\s*"([^"]+)"\s*$')
    WRAPPING_QUOTES = re.compile(r'^["“](.+)["”]$', re.S)

    CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
        ("behavioral", ("team", "collaboration")),
        ("technical", ("code", "technical")),
        ("experience", ("project", "experience")),
    )

    @staticmethod
    def clean_spoken_text(text: str) -> str:
        """
        Strip meta-commentary and wrapping quotes from generated text.

        Returns an empty string when nothing speakable is left.
        """
        cleaned = (text or "").strip()

        lines = [line.strip() for line in cleaned.splitlines() if line.strip()]
        if len(lines) > 1 and PromptFormatter.META_LINE.match(lines[0]):
            lines = lines[1:]
        cleaned = " ".join(lines)

        for pattern in PromptFormatter.META_PHRASES:
            cleaned = pattern.sub("", cleaned)

        quoted = PromptFormatter.TRAILING_AFTER_COLON.search(cleaned)
        if quoted:
            cleaned = quoted.group(1)

        cleaned = cleaned.strip()
        unwrapped = PromptFormatter.WRAPPING_QUOTES.match(cleaned)
        if unwrapped:
            cleaned = unwrapped.group(1).strip()
        return cleaned

    @staticmethod
    def categorize_question(question: str, focus_areas: Sequence[str]) -> str:
        """Tag a question with the first focus area it mentions, else a keyword category."""
        lowered = question.lower()
        for area in focus_areas:
            if area.lower() in lowered:
                return area
        for category, keywords in PromptFormatter.CATEGORY_KEYWORDS:
            if any(k in lowered for k in keywords):
                return category
        return "general"

    @staticmethod
    def opening_question(panel_size: int) -> str:
        return "Tell us about yourself." if panel_size > 1 else "Tell me about yourself."

    @staticmethod
    def fallback_greeting(persona: Persona, co_interviewers: Sequence[Persona], position: Optional[str]) -> str:
        templates = InterviewPrompts.fallback_messages()
        parts: List[str] = [templates["greeting"].format(name=persona.name, role=persona.role)]
        if co_interviewers:
            others = " and ".join(f"{p.name}, our {p.role}" for p in co_interviewers)
            parts.append(templates["co_interviewers"].format(others=others))
        if position:
            parts.append(templates["position"].format(position=position))
        parts.append(templates["greeting_end"])
        return " ".join(parts)

    @staticmethod
    def fallback_closing(persona: Persona) -> str:
        return InterviewPrompts.fallback_messages()["closing"].format(name=persona.name)
