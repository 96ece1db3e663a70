import logging
from typing import Any, List, Literal, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from food_copilot import conversation_store
from food_copilot.config import CORS_ORIGINS
from food_copilot.directive_normalizer import extract_candidates
from food_copilot.directive_pipeline import DirectivePipeline
from food_copilot.llm.base import DirectiveGenerator
from food_copilot.llm.factory import GeneratorFactory, list_registered_models
from food_copilot.prompt_logic.directive_prompt import build_generator_messages
from food_copilot.utils.error_handling import ErrorMessageFormatter
from food_copilot.utils.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Food Copilot API", description="Generative UI directives for food analysis")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

pipeline = DirectivePipeline()
_generator: Optional[DirectiveGenerator] = None


def get_generator() -> DirectiveGenerator:
    global _generator
    if _generator is None:
        _generator = GeneratorFactory.create_generator()
    return _generator


class HistoryMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: Any = None  # string, or structured assistant directives


class AnalysisRequest(BaseModel):
    """Request for one analysis turn."""
    model_config = ConfigDict(populate_by_name=True)

    image_base64: Optional[str] = Field(None, alias="imageBase64", min_length=16)
    user_context: Optional[str] = Field(None, alias="userContext")
    history: List[HistoryMessage] = Field(default_factory=list)
    session_id: Optional[str] = Field(None, alias="sessionId")


def _json_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@app.post("/api/ai-response")
async def ai_response(request: Request, generator: DirectiveGenerator = Depends(get_generator)):
    """
    One turn: generator → directive pipeline → finalized sequence + score.

    Example:
        POST /api/ai-response
        {
            "userContext": "I am diabetic",
            "imageBase64": "<base64 jpeg>",
            "history": []
        }
    """
    try:
        body = await request.json()
    except ValueError:
        body = None

    try:
        req = AnalysisRequest.model_validate(body)
    except ValidationError as e:
        logger.info(f"Rejected analysis request: {e.error_count()} validation errors")
        return _json_error(400, "Invalid request body")

    history = [m.model_dump() for m in req.history]
    if req.session_id and not history:
        history = conversation_store.get_history(req.session_id)

    messages = build_generator_messages(req.user_context, req.image_base64, history)

    try:
        raw = await run_in_threadpool(generator.generate_directives, messages)
    except Exception as e:
        logger.error(f"Generator call failed: {e}")
        return _json_error(502, ErrorMessageFormatter.format(e))

    if raw is None or not extract_candidates(raw):
        logger.error("Generator returned no usable directives")
        return _json_error(502, ErrorMessageFormatter.format("empty generator result"))

    result = pipeline.run(raw)

    if req.session_id:
        conversation_store.append_user(req.session_id, req.user_context or "")
        conversation_store.append_assistant(req.session_id, result.sequence)

    return JSONResponse(result.to_response())


@app.get("/api/health")
async def health(generator: DirectiveGenerator = Depends(get_generator)):
    return JSONResponse({
        "status": "ok",
        "generator": generator.health_check(),
        "registered_models": list_registered_models(),
        "active_sessions": conversation_store.get_session_count(),
    })


@app.get("/api/conversation/{session_id}")
async def get_conversation(session_id: str):
    """Finalized turns retained for a session (read-only)."""
    return JSONResponse({
        "session_id": session_id,
        "messages": conversation_store.get_history(session_id),
        "feed": conversation_store.get_directive_feed(session_id),
    })


@app.delete("/api/conversation/{session_id}")
async def delete_conversation(session_id: str):
    conversation_store.clear_history(session_id)
    return JSONResponse({"session_id": session_id, "status": "cleared"})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
