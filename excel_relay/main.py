"""
Excel Relay - FastAPI application.

Accepts a prompt, a message (optionally with an image) or a conversation,
forwards it once to the Groq chat-completion API and reshapes the reply.

Endpoints:
  GET  /        - Liveness string
  POST /chat    - Relay a request upstream
  GET  /health  - Configuration status
  GET  /stats   - Upstream call statistics
"""
import logging
import sys
from pathlib import Path
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings, get_settings
from .errors import RelayError
from .llm import UpstreamClient
from .models import ChatRequest, ErrorResponse, HealthResponse
from .relay import RelayContext, handle_chat


LIVENESS_TEXT = "🧠 Groq Unified Chat + Vision API is running!"


def setup_logging(settings: Settings):
    """Configure logging with file and console handlers."""
    log_level = getattr(logging, settings.log_level.upper())

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    # Console handler (always)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (if configured)
    if settings.log_path:
        try:
            log_path = Path(settings.log_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            root_logger.info("Logging to file: %s", log_path)
        except OSError as e:
            root_logger.error("Failed to set up file logging: %s", e)

    return logging.getLogger(__name__)


logger = setup_logging(get_settings())


def get_relay_context(request: Request) -> RelayContext:
    """Shared context created by create_app."""
    return request.app.state.relay


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create the relay application.

    Args:
        settings: Settings to use; defaults to the environment
        transport: httpx transport for the upstream client (tests pass a mock)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    context = RelayContext(
        settings=settings,
        upstream=UpstreamClient(
            url=settings.groq_url,
            api_key=settings.groq_api_key,
            timeout=settings.upstream_timeout,
            transport=transport,
        ),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Excel relay starting up")
        logger.info("Upstream: %s", settings.groq_url)
        logger.info(
            "Models: text=%s, vision=%s, action=%s (mode=%s)",
            settings.text_model, settings.vision_model,
            settings.action_model, settings.action_mode,
        )

        if not settings.has_api_key:
            if settings.require_api_key:
                logger.error("GROQ_API_KEY not set!")
                raise RuntimeError("GROQ_API_KEY is not configured")
            logger.warning("GROQ_API_KEY not set, /chat will answer 500")

        yield

        logger.info("Excel relay shutting down")
        await context.upstream.aclose()

    app = FastAPI(
        title="Excel Relay",
        description="Relay for Groq chat, vision and spreadsheet-action prompts",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.relay = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        if exc.status_code >= 500:
            logger.error("Relay error %d: %s", exc.status_code, exc.message)
        else:
            logger.info("Relay error %d: %s", exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
            for err in exc.errors()
        )
        return JSONResponse(status_code=400, content={"error": f"Invalid request body: {details}"})

    @app.get("/", response_class=PlainTextResponse)
    async def home():
        """Liveness check."""
        return LIVENESS_TEXT

    @app.get("/health", response_model=HealthResponse)
    async def health(relay: RelayContext = Depends(get_relay_context)):
        """Report whether the relay can call upstream."""
        s = relay.settings
        return HealthResponse(
            status="ok" if s.has_api_key else "degraded",
            api_key_configured=s.has_api_key,
            text_model=s.text_model,
            vision_model=s.vision_model,
            action_model=s.action_model,
            action_mode=s.action_mode,
        )

    @app.get("/stats")
    async def stats(relay: RelayContext = Depends(get_relay_context)):
        """Return upstream call statistics."""
        return relay.upstream.stats.get_summary()

    @app.post(
        "/chat",
        responses={
            status_code: {"model": ErrorResponse}
            for status_code in (400, 422, 500, 504)
        },
    )
    async def chat(
        request: ChatRequest,
        relay: RelayContext = Depends(get_relay_context),
    ):
        """
        Relay a chat, vision, conversation or spreadsheet-action request.

        Returns {reply}, {actions} or {response}; failures return {error}.
        """
        logger.debug(
            "Chat request: prompt=%s, message=%s, image=%s, messages=%s",
            request.prompt is not None,
            request.message is not None,
            request.image_url is not None or request.image_base64 is not None,
            len(request.messages) if request.messages is not None else None,
        )
        return await handle_chat(request, relay)

    return app


app = create_app()


def main():
    """Run the relay with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
