# edutrack/routers/content_router.py
from fastapi import APIRouter, HTTPException, Depends
import logging
import os
from sqlalchemy.orm import Session
from dotenv import load_dotenv
from ..schemas.content_schemas import ContentRequest, EducationalContent, QuestionBankRequest, QuestionBankResult
from ..services.content_service import ContentClient, QuestionBankGenerator
from ..services.errors import InvalidInputError
from ..services.quiz_service import validate_topic_level
from ..database.database import get_db
from .errors import http_error

load_dotenv()

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["content"])


async def get_content_client():
    client = ContentClient()
    try:
        yield client
    finally:
        await client.aclose()


def get_question_generator(topic: str, level: str, db: Session = Depends(get_db)) -> QuestionBankGenerator:
    # Topic and level are checked before the API key
    try:
        validate_topic_level(topic, level)
    except InvalidInputError as e:
        raise http_error(e, "generating questions")
    if not os.getenv("OPENAI_API_KEY"):
        raise HTTPException(status_code=500, detail="OpenAI API key not configured")
    return QuestionBankGenerator(db)


@router.post("/content/generate", response_model=EducationalContent)
async def generate_content(
    request: ContentRequest,
    client: ContentClient = Depends(get_content_client),
) -> EducationalContent:
    """Lesson notes, MCQs and case studies for a topic."""
    try:
        logger.info(f"Generating content for topic: {request.topic}")
        return await client.generate(request.topic, request.context)
    except Exception as e:
        raise http_error(e, "generating content")


@router.post("/quiz/{topic}/{level}/generate", response_model=QuestionBankResult, status_code=201)
async def generate_question_bank(
    topic: str,
    level: str,
    request: QuestionBankRequest,
    generator: QuestionBankGenerator = Depends(get_question_generator),
) -> QuestionBankResult:
    """Add LLM-written questions to the quiz bank for a topic and level."""
    try:
        validate_topic_level(topic, level)
        result = await generator.generate(topic, level, request.count)
        logger.info(f"Stored {result.stored} generated questions for {topic}/{level}")
        return result
    except Exception as e:
        raise http_error(e, "generating questions")
