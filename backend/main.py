# backend/main.py

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.dependencies import get_conversation_log, get_dispatcher
from app.api.routes_chat import router as chat_router
from app.api.routes_conversation import router as conversation_router
from app.core.config_loader import settings
from app.core.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Credentials are only checked when a turn needs them
    logger.info(
        f"Travel agent starting (env={settings.environment}, model={settings.LLM_MODEL}, "
        f"llm_key={'set' if settings.LLM_API_KEY else 'missing'}, "
        f"amadeus={'set' if settings.AMADEUS_API_KEY and settings.AMADEUS_API_SECRET else 'missing'})"
    )

    yield

    if get_conversation_log.cache_info().currsize:
        get_conversation_log().close()
    get_dispatcher.cache_clear()
    get_conversation_log.cache_clear()
    logger.info("Travel agent stopped")


app = FastAPI(
    title="Travel Agent",
    description="Multi-agent travel chat: coordinator, flight and hotel agents with live Amadeus pricing",
    version="1.0.0",
    lifespan=lifespan,
)

# -------------------------------------------------------------
# CORS (pre-flight OPTIONS answered by the middleware)
# -------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # update to frontend domain in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


# -------------------------------------------------------------
# ERRORS -> { "error": ... }
# -------------------------------------------------------------
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Rejected request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(status_code=500, content={"error": str(exc) or "Unknown error occurred"})


app.include_router(chat_router)
app.include_router(conversation_router)


@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "Travel agent backend is running",
        "env": settings.environment,
    }


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.environment == "development")
