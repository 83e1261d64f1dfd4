# edutrack/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from dotenv import load_dotenv
from edutrack.database.database import init_db
import os

# Import routers
from edutrack.routers.user_router import router as user_router
from edutrack.routers.quiz_router import router as quiz_router
from edutrack.routers.test_router import router as test_router
from edutrack.routers.content_router import router as content_router

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
init_db()

# Question bank generation is disabled without a key
if not os.getenv("OPENAI_API_KEY"):
    logger.warning("OPENAI_API_KEY not found in environment variables")

app = FastAPI(title="EduTrack API")

# CORS middleware configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(user_router)
app.include_router(quiz_router)
app.include_router(test_router)
app.include_router(content_router)

@app.get("/")
async def root():
    return {"message": "EduTrack API is running"}

if __name__ == "__main__":
    import uvicorn
    # Port 8000 is taken by the content generation service by default
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8080")), log_level="info")
