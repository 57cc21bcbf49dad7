from __future__ import annotations

# Served with: uvicorn --factory app.main:create_app

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from pydantic import BaseModel, Field

from app.context import get_request_context
from config.settings import Settings, get_settings
from eightball.core.exceptions import PersistenceError, PreconditionError
from eightball.core.history import HistoryStore
from eightball.core.metadata import MetadataProvider
from eightball.core.models import RequestContext
from eightball.core.store import build_store
from eightball.oracle import Oracle
from eightball.tools.community_directory import RedditDirectory


logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="[%(asctime)s] %(levelname)s - %(message)s",
)
logger = logging.getLogger("eightball")


class AskRequest(BaseModel):
    question: Optional[str] = Field(default=None, description="Yes/no question for the 8-ball")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


def build_oracle(settings: Settings) -> tuple[Oracle, list]:
    """Wire the oracle from settings; also return resources to close on shutdown."""
    store = build_store(settings.redis_url)
    directory = RedditDirectory(
        base_url=settings.directory_api_url,
        timeout=settings.directory_timeout,
        user_agent=settings.directory_user_agent,
    )
    oracle = Oracle(
        metadata_provider=MetadataProvider(
            store,
            directory,
            cache_ttl=settings.metadata_cache_ttl,
            timeout=settings.directory_timeout,
        ),
        history=HistoryStore(store, ttl_seconds=settings.history_ttl),
        history_limit=settings.history_limit,
    )
    logger.info(
        "Config: store=%s directory=%s timeout=%.1fs",
        "redis" if settings.redis_url else "memory",
        settings.directory_api_url,
        settings.directory_timeout,
    )
    return oracle, [directory.aclose, store.close]


def get_oracle(request: Request) -> Oracle:
    return request.app.state.oracle


def create_app(oracle: Optional[Oracle] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    closers: list = []
    if oracle is None:
        oracle, closers = build_oracle(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        for close in closers:
            try:
                await close()
            except Exception as exc:
                logger.warning("Error while closing resource: %s", exc)

    app = FastAPI(title="Community Magic 8-Ball", version="1.0.0", lifespan=lifespan)
    app.state.oracle = oracle
    app.state.settings = settings

    # CORS: allow local frontend during development
    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(PreconditionError)
    async def precondition_handler(_request: Request, exc: PreconditionError) -> JSONResponse:
        return _error(400, exc.message)

    @app.post("/api/ask")
    async def ask(
        req: Optional[AskRequest] = Body(default=None),
        context: RequestContext = Depends(get_request_context),
        oracle: Oracle = Depends(get_oracle),
    ) -> Dict[str, Any]:
        question = req.question if req is not None else None
        try:
            result = await oracle.ask(context, question)
        except PreconditionError:
            raise
        except Exception as e:
            logger.exception("Error processing Magic 8-Ball question: %s", e)
            return _error(500, "Internal server error while consulting the Magic 8-Ball")
        body: Dict[str, Any] = {"status": "success"}
        body.update(result.to_wire())
        return body

    @app.get("/api/subreddit")
    async def subreddit(
        context: RequestContext = Depends(get_request_context),
        oracle: Oracle = Depends(get_oracle),
    ) -> Dict[str, Any]:
        try:
            metadata = await oracle.community(context)
        except PreconditionError:
            raise
        except Exception as e:
            logger.exception("Error getting subreddit info: %s", e)
            return _error(500, "Failed to get subreddit info")
        if metadata is None:
            return {"status": "success"}
        return {"status": "success", "subreddit": metadata.to_wire()}

    @app.get("/api/history")
    async def history(
        context: RequestContext = Depends(get_request_context),
        oracle: Oracle = Depends(get_oracle),
    ) -> Dict[str, Any]:
        try:
            entries = await oracle.history(context)
        except PreconditionError:
            raise
        except PersistenceError as e:
            logger.error("History unavailable: %s", e)
            return _error(500, "Failed to get history")
        except Exception as e:
            logger.exception("Error getting question history: %s", e)
            return _error(500, "Failed to get history")
        return {"status": "success", "history": [entry.model_dump() for entry in entries]}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
