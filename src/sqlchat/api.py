# api.py

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.engine import Engine

from . import __version__
from .config import Settings
from .db import Database, create_mysql_engine
from .errors import ExecutionFailed, PipelineError, ServerFault
from .history import HistoryStore
from .llm import LLMSqlGenerator
from .nl2sql_core import QueryPipeline

logger = logging.getLogger(__name__)


# ====== Wiring ======

@lru_cache()
def get_settings() -> Settings:
    return Settings()


@lru_cache()
def get_engine() -> Engine:
    return create_mysql_engine(get_settings())


@lru_cache()
def get_pipeline() -> QueryPipeline:
    cfg = get_settings()
    return QueryPipeline(
        generator=LLMSqlGenerator.from_settings(cfg),
        database=Database(get_engine()),
        read_only=cfg.SQL_READ_ONLY,
    )


@lru_cache()
def get_history_store() -> HistoryStore:
    return HistoryStore(get_engine())


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if get_engine.cache_info().currsize:
        get_engine().dispose()


cfg = get_settings()
logging.basicConfig(level=cfg.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
# LiteLLM is chatty at INFO
logging.getLogger("LiteLLM").setLevel(logging.WARNING)

app = FastAPI(
    title="SQL Chat API",
    description="Natural-language questions to MySQL queries via an LLM",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cfg.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ====== Request / Response Models ======

class FetchQueryRequest(BaseModel):
    query: Optional[Any] = None

class FetchQueryResponse(BaseModel):
    result: List[Dict[str, Any]]

class QueryErrorResponse(BaseModel):
    error: str
    details: Any = None

class StoreHistoryRequest(BaseModel):
    userInput: Optional[Any] = None
    botResponse: Optional[Any] = None

class MessageResponse(BaseModel):
    message: str

class HistoryResponse(BaseModel):
    history: List[Dict[str, Any]]


def _error_response(err: PipelineError) -> JSONResponse:
    return JSONResponse(status_code=err.status_code, content=jsonable_encoder(err.to_dict()))


def _message_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


# ====== Health Check ======

@app.get("/health")
def health_check():
    return {"status": "ok"}


# ====== Main Endpoint ======

@app.post(
    "/fetch-query",
    response_model=FetchQueryResponse,
    responses={
        400: {"model": QueryErrorResponse},
        500: {"model": QueryErrorResponse},
    },
)
async def fetch_query(
    payload: FetchQueryRequest,
    pipeline: QueryPipeline = Depends(get_pipeline),
):
    try:
        rows = await pipeline.handle_query(payload.query)
        content = jsonable_encoder({"result": rows}, custom_encoder={bytes: bytes.hex})
    except PipelineError as e:
        return _error_response(e)
    except Exception:
        logger.exception("Unexpected error while answering query")
        return _error_response(ServerFault())
    return JSONResponse(content=content)


# ====== History ======

@app.post(
    "/store-history",
    response_model=MessageResponse,
    responses={400: {"model": MessageResponse}, 500: {"model": MessageResponse}},
)
def store_history(
    payload: StoreHistoryRequest,
    store: HistoryStore = Depends(get_history_store),
):
    if not (isinstance(payload.userInput, str) and payload.userInput) or not (
        isinstance(payload.botResponse, str) and payload.botResponse
    ):
        return _message_response(400, "userInput and botResponse are required")

    try:
        store.store(payload.userInput, payload.botResponse)
    except ExecutionFailed:
        return _message_response(500, "Database error")
    except Exception:
        logger.exception("Error storing history")
        return _message_response(500, "Server error")
    return MessageResponse(message="History stored successfully")


@app.get(
    "/fetch-history",
    response_model=HistoryResponse,
    responses={500: {"model": MessageResponse}},
)
def fetch_history(store: HistoryStore = Depends(get_history_store)):
    try:
        rows = store.fetch()
    except ExecutionFailed:
        return _message_response(500, "Database error")
    except Exception:
        logger.exception("Server error while fetching history")
        return _message_response(500, "Server error")
    return HistoryResponse(history=rows)


def main():
    import uvicorn

    logger.info("Server running on port %s", cfg.PORT)
    uvicorn.run("sqlchat.api:app", host=cfg.HOST, port=cfg.PORT)


if __name__ == "__main__":
    main()
