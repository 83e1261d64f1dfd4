# edutrack/services/content_service.py
from typing import Any, Dict, List, Optional
import logging
import os
import re
import httpx
from openai import OpenAI
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from dotenv import load_dotenv
from ..models.progress_models import DBAIQuestion
from ..schemas.content_schemas import EducationalContent, GeneratedQuestion, QuestionBankResult
from .errors import ContentGenerationError

load_dotenv()
logger = logging.getLogger(__name__)

DEFAULT_CONTENT_API_URL = "http://localhost:8000/generate"
OPTION_LETTERS = ("A", "B", "C", "D")

_NUMBERED = re.compile(r"^(\d+)[.)]\s*(.*)$")
_OPTION = re.compile(r"^\(?([a-dA-D])[).]\s*(.*)$")
_ANSWER = re.compile(r"^(?:\(([a-dA-D])\)|([a-dA-D])(?=[).:]|$))")


class ContentClient:
    """Client for the lesson content generation endpoint.

    One POST per call, no retries and no auth header.
    """

    def __init__(self, base_url: Optional[str] = None, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url or os.getenv("CONTENT_API_URL", DEFAULT_CONTENT_API_URL)
        timeout = float(os.getenv("CONTENT_API_TIMEOUT", "60"))
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def generate(self, topic: str, context: Optional[str] = None) -> EducationalContent:
        payload: Dict[str, Any] = {"topic": topic}
        if context:
            payload["context"] = context

        try:
            r = await self._client.post(self.base_url, json=payload)
            r.raise_for_status()
        except httpx.HTTPStatusError as http_err:
            logger.error(f"Content endpoint returned {http_err.response.status_code} for topic '{topic}'")
            raise ContentGenerationError("Failed to generate content") from http_err
        except httpx.RequestError as net_err:
            logger.error(f"Content endpoint unreachable: {str(net_err)}")
            raise ContentGenerationError("Failed to generate content") from net_err

        try:
            return EducationalContent.model_validate(r.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unexpected content response: {r.text[:200]}")
            raise ContentGenerationError("Content endpoint returned an unexpected response") from e

    async def aclose(self) -> None:
        await self._client.aclose()


def generate_mcq_format() -> str:
    return """Format each MCQ as follows:
1. [Question]
   a) [Option A]
   b) [Option B]
   c) [Option C]
   d) [Option D]

Include an ANSWER KEY at the end:
1. [Correct option letter]
[and so on...]"""


def generate_prompt(topic: str, level: str, count: int) -> str:
    """Prompt for a quiz bank of multiple choice questions."""
    return f"""Generate {count} {level} level multiple choice questions on {topic} for a computer science student.

Requirements:
- Exactly 4 options per question, only one correct
- Difficulty must match the {level} level
- Each question should be clearly numbered

{generate_mcq_format()}"""


def parse_question_bank(content: str) -> List[GeneratedQuestion]:
    """Parse numbered MCQs and their answer key.

    Questions that do not end up with four options and a valid answer letter
    are dropped.
    """
    questions: List[GeneratedQuestion] = []
    current: Optional[GeneratedQuestion] = None
    section = "questions"

    for line in content.split("\n"):
        line = line.strip()
        if not line:
            continue

        if "ANSWER KEY" in line.upper():
            if current:
                questions.append(current)
                current = None
            section = "answer_key"
            continue

        if section == "questions":
            option = _OPTION.match(line)
            numbered = _NUMBERED.match(line)
            if numbered and not option:
                if current:
                    questions.append(current)
                current = GeneratedQuestion(question_text=numbered.group(2).strip(), options=[])
            elif option and current:
                current.options.append(option.group(2).strip())
            elif current and not current.options:
                # Question text wrapped onto the next line
                current.question_text = f"{current.question_text} {line}".strip()
        else:
            numbered = _NUMBERED.match(line)
            if not numbered:
                continue
            index = int(numbered.group(1))
            answer = _ANSWER.match(numbered.group(2).strip())
            if answer and 0 < index <= len(questions):
                questions[index - 1].correct_option = (answer.group(1) or answer.group(2)).upper()

    if current:
        questions.append(current)

    return [
        q for q in questions
        if q.question_text and len(q.options) == 4 and q.correct_option in OPTION_LETTERS
    ]


class QuestionBankGenerator:
    """Fills the quiz bank for a topic and level with LLM-written questions."""

    def __init__(self, db: Session, client: Optional[Any] = None):
        self.db = db
        self.client = client or OpenAI(api_key=os.getenv("OPENAI_API_KEY"))
        self.model = os.getenv("OPENAI_MODEL", "gpt-4")

    async def generate(self, topic: str, level: str, count: int) -> QuestionBankResult:
        prompt = generate_prompt(topic, level, count)
        logger.info(f"Generating {count} questions for {topic}/{level}")

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "system",
                    "content": "You are an experienced computer science teacher who writes clear multiple choice questions.",
                },
                {"role": "user", "content": prompt},
            ],
            temperature=0.7,
            max_tokens=3000,
        )
        parsed = parse_question_bank(response.choices[0].message.content or "")
        if not parsed:
            raise ContentGenerationError("Model output contained no usable questions")

        rows = [
            DBAIQuestion(
                topic=topic,
                level=level,
                question_text=q.question_text,
                option_a=q.options[0],
                option_b=q.options[1],
                option_c=q.options[2],
                option_d=q.options[3],
                correct_option=q.correct_option,
            )
            for q in parsed
        ]
        try:
            self.db.add_all(rows)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error storing generated questions: {str(e)}")
            self.db.rollback()
            raise

        return QuestionBankResult(
            topic=topic,
            level=level,
            stored=len(rows),
            question_ids=[row.question_id for row in rows],
        )
