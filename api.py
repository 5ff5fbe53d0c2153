"""
REST API for Gujarati Broadcast News Scripts

This FastAPI application generates Gujarati news scripts with Gemini,
stores them in MongoDB and lets editors rewrite them with AI instructions.
Every LLM call goes through the key rotator so rate limited keys are
swapped out transparently.
"""

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
import logging
from datetime import datetime
from functools import partial

from article_generator import ScriptGenerator, ScriptRequest, safe_title
from config import Settings
from exceptions import AllCredentialsExhaustedError, NewsNotFoundError, RetryBudgetExhaustedError
from key_pool import KeyPool
from key_rotation import KeyRotator
from llm_client import create_client
from news_repo import NewsRepository, serialize
from newsroom_rules import FormatOptions, NewsFormat, derive_title

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

SERVICE_UNAVAILABLE_ERRORS = (AllCredentialsExhaustedError, RetryBudgetExhaustedError)

# Initialize FastAPI app
app = FastAPI(
    title="Gujarati News Script API",
    description="Generate, store and edit Gujarati broadcast news scripts.",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)


# Exception Handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal Server Error", "detail": str(exc)},
    )


@app.exception_handler(AllCredentialsExhaustedError)
@app.exception_handler(RetryBudgetExhaustedError)
async def service_unavailable_handler(request: Request, exc: Exception):
    logger.warning(f"Generation unavailable: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "success": False,
            "error": "Service temporarily unavailable, try again later",
            "detail": str(exc),
        },
    )


@app.exception_handler(NewsNotFoundError)
async def not_found_handler(request: Request, exc: NewsNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"success": False, "error": "Not found", "detail": str(exc)},
    )


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this based on your needs
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Dependencies
# ============================================================================

def build_generator(settings: Settings) -> ScriptGenerator:
    """
    Build the key pool, rotator and generator for one process.

    Raises:
        ConfigurationError: If no API keys are configured
    """
    pool = KeyPool(settings.api_keys)
    rotator = KeyRotator(
        pool,
        partial(create_client, settings=settings),
        max_retries=settings.key_max_retries,
        backoff_seconds=settings.key_backoff_seconds,
        cooldown_seconds=settings.key_cooldown_seconds,
    )
    return ScriptGenerator(rotator, settings)


def get_generator(request: Request) -> ScriptGenerator:
    return request.app.state.generator


def get_repository(request: Request) -> NewsRepository:
    return request.app.state.repository


# ============================================================================
# Request/Response Models
# ============================================================================

class NewsCreateRequest(BaseModel):
    """Request model for creating a news item."""

    title: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    brief: Optional[str] = Field(None, description="Short summary or prompt seed")
    content: Optional[str] = Field(None, description="Markdown content; generated when empty")


class NewsUpdateRequest(BaseModel):
    """Request model for updating a news item."""

    title: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    brief: Optional[str] = None
    instructions: Optional[str] = Field(None, description="AI rewrite instructions")


class GenerateOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vo_count: Optional[int] = Field(None, alias="voCount")
    top_band_count: Optional[int] = Field(None, alias="topBandCount")
    story_count: Optional[int] = Field(None, alias="storyCount")
    topics: Optional[List[str]] = None


class GenerateRequest(BaseModel):
    """Request model for format-aware script generation."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    format: Optional[NewsFormat] = None
    category: Optional[str] = None
    location: Optional[str] = None
    brief: Optional[str] = None
    base_content: Optional[str] = Field(None, alias="baseContent")
    instructions: Optional[str] = None
    options: Optional[GenerateOptions] = None

    def to_script_request(self) -> ScriptRequest:
        options = None
        if self.options is not None:
            options = FormatOptions(
                vo_count=self.options.vo_count,
                top_band_count=self.options.top_band_count,
                story_count=self.options.story_count,
                topics=self.options.topics or [],
            )
        return ScriptRequest(
            title=self.title,
            format=self.format,
            category=self.category,
            location=self.location,
            brief=self.brief,
            base_content=self.base_content,
            instructions=self.instructions,
            options=options,
        )


class GenerateResponse(BaseModel):
    content: str


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Service health status")
    timestamp: str = Field(..., description="Current server timestamp")
    version: str = Field(..., description="API version")
    keys_total: Optional[int] = None
    keys_available: Optional[int] = None
    keys: Optional[List[dict]] = Field(None, description="Masked per-key cooldown state")


# ============================================================================
# API Endpoints
# ============================================================================

@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check if the API service is running"
)
async def health_check(request: Request):
    """Health check endpoint."""
    generator = getattr(request.app.state, "generator", None)
    pool = generator.rotator.pool if generator else None
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": API_VERSION,
        "keys_total": len(pool) if pool is not None else None,
        "keys_available": pool.available_count() if pool is not None else None,
        "keys": pool.snapshot() if pool is not None else None,
    }


@app.get("/api/news", summary="List News")
async def list_news(
    page: int = 1,
    pageSize: int = 10,
    repository: NewsRepository = Depends(get_repository),
):
    """List stored news, newest first."""
    data = await repository.list(page, pageSize)
    data["items"] = [serialize(doc) for doc in data["items"]]
    return data


@app.post("/api/news", status_code=status.HTTP_201_CREATED, summary="Create News")
async def create_news(
    request: NewsCreateRequest,
    generator: ScriptGenerator = Depends(get_generator),
    repository: NewsRepository = Depends(get_repository),
):
    """
    Store a news item, generating the report first when no content is given.

    The stored title is taken from the first markdown heading when present
    so the Gujarati headline wins over the English input title.
    """
    title = safe_title(request.title)
    try:
        content = (request.content or "").strip()
        if not content:
            content = await generator.generate_report(
                title, request.category, request.location, request.brief
            )

        saved = await repository.insert({
            "title": derive_title(content, title),
            "category": request.category,
            "location": request.location,
            "brief": request.brief,
            "content": content,
        })
        logger.info(f"Saved news {saved['_id']} ({len(content)} chars)")
        return serialize(saved)

    except (HTTPException, *SERVICE_UNAVAILABLE_ERRORS):
        raise
    except Exception as e:
        logger.error(f"POST /api/news error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/news/{news_id}", summary="Get News")
async def get_news(news_id: str, repository: NewsRepository = Depends(get_repository)):
    doc = await repository.get(news_id)
    if doc is None:
        raise NewsNotFoundError(news_id)
    return serialize(doc)


@app.delete("/api/news/{news_id}", summary="Delete News")
async def delete_news(news_id: str, repository: NewsRepository = Depends(get_repository)):
    await repository.delete(news_id)
    return {"ok": True}


@app.put("/api/news/{news_id}", summary="Update News")
async def update_news(
    news_id: str,
    request: NewsUpdateRequest,
    generator: ScriptGenerator = Depends(get_generator),
    repository: NewsRepository = Depends(get_repository),
):
    """
    Update metadata, optionally rewriting the content with AI instructions.

    Args:
        news_id: Stored news id
        request: Fields to change; `instructions` triggers an AI rewrite
    """
    try:
        content_update = None
        if request.instructions and request.instructions.strip():
            existing = await repository.get(news_id)
            if existing is None:
                raise NewsNotFoundError(news_id)
            content_update = await generator.rewrite_article(
                existing.get("content", ""), request.instructions
            )

        final_title = request.title
        if content_update:
            final_title = derive_title(content_update, final_title)

        updates = {
            "title": final_title.strip() if final_title and final_title.strip() else None,
            "category": request.category,
            "location": request.location,
            "brief": request.brief,
            "content": content_update or None,
        }
        updated = await repository.update(news_id, updates)
        if updated is None:
            raise NewsNotFoundError(news_id)
        return serialize(updated)

    except (HTTPException, NewsNotFoundError, *SERVICE_UNAVAILABLE_ERRORS):
        raise
    except Exception as e:
        logger.error(f"PUT /api/news/{news_id} error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.post(
    "/api/news/generate",
    response_model=GenerateResponse,
    summary="Generate Script",
    description="Generate a broadcast script in the requested format without storing it."
)
async def generate_script(
    request: GenerateRequest,
    generator: ScriptGenerator = Depends(get_generator),
):
    try:
        logger.info("=" * 80)
        logger.info("GENERATION REQUEST RECEIVED")
        logger.info(f"Title: {safe_title(request.title)[:100]}")
        logger.info(f"Format: {request.format.value if request.format else 'default'}")
        logger.info("=" * 80)

        content = await generator.generate_script(request.to_script_request())

        logger.info(f"GENERATION SUCCESSFUL ({len(content)} chars)")
        return GenerateResponse(content=content)

    except (HTTPException, *SERVICE_UNAVAILABLE_ERRORS):
        raise
    except Exception as e:
        logger.error(f"Generation error: {e}")
        logger.exception("Full traceback:")
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# Application Startup/Shutdown Events
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Build the key pool, generator and repository; fail fast without keys."""
    logger.info("News Script API starting up...")
    settings = Settings.from_env()
    app.state.generator = build_generator(settings)
    app.state.repository = NewsRepository.connect(settings.mongodb_uri, settings.mongodb_db)
    logger.info(f"Loaded {len(settings.api_keys)} API key(s), model {settings.llm_model}")


@app.on_event("shutdown")
async def shutdown_event():
    """Log shutdown information."""
    logger.info("News Script API shutting down...")
    generator = getattr(app.state, "generator", None)
    if generator is not None:
        generator.rotator.invalidate()


if __name__ == "__main__":
    import uvicorn

    # Run the API server
    uvicorn.run(
        "api:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
