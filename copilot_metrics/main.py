from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from functools import partial
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from .schemas.api import ChartData, LoadRequest, LoadStatus, LoadTextRequest, UserDetail
from .schemas.metrics import (
    DailyMetrics,
    FeatureMetrics,
    GlobalStats,
    IdeMetrics,
    LanguageMetrics,
    UsageRecord,
    UserSummary,
)
from .services.aggregator import MetricsAggregator
from .services.cache import SessionStore
from .services.charts import CHART_BUILDERS, build_chart
from .services.fetcher import fetch_text


LOGGER = logging.getLogger("copilot_metrics")
logging.basicConfig(level=logging.INFO)
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_METRICS_PATH = BASE_DIR / "resources" / "data" / "metrics.ndjson"


def metrics_path() -> str:
    return os.getenv("COPILOT_METRICS_PATH", str(DEFAULT_METRICS_PATH))


def fetch_timeout() -> Optional[float]:
    raw = os.getenv("COPILOT_METRICS_FETCH_TIMEOUT")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid COPILOT_METRICS_FETCH_TIMEOUT=%r", raw)
        return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    cache_enabled = os.getenv("COPILOT_METRICS_CACHE", "true").lower() != "false"
    session_store = SessionStore() if cache_enabled else None
    aggregator = MetricsAggregator(
        store=session_store,
        fetcher=partial(fetch_text, timeout=fetch_timeout()),
    )
    autoload = os.getenv("COPILOT_METRICS_AUTOLOAD", "false").lower() == "true"
    if autoload and not aggregator.is_data_loaded:
        aggregator.load(metrics_path())

    app.state.session_store = session_store
    app.state.aggregator = aggregator

    try:
        yield
    finally:
        if session_store:
            session_store.clear()


app = FastAPI(
    title="Copilot Metrics Dashboard",
    description="Aggregates Copilot usage-metric exports into dashboard views.",
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_aggregator(request: Request) -> MetricsAggregator:
    aggregator: MetricsAggregator = getattr(request.app.state, "aggregator", None)
    if not aggregator:
        raise HTTPException(status_code=500, detail="Metrics aggregator is not initialized.")
    return aggregator


def _load_result(aggregator: MetricsAggregator, succeeded: bool) -> LoadStatus:
    if not succeeded:
        raise HTTPException(status_code=422, detail=aggregator.error)
    return aggregator.status()


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/status", response_model=LoadStatus)
def load_status(request: Request) -> LoadStatus:
    return get_aggregator(request).status()


@app.post("/load", response_model=LoadStatus)
def load(request: Request, payload: Optional[LoadRequest] = None) -> LoadStatus:
    aggregator = get_aggregator(request)
    path = (payload.path if payload else None) or metrics_path()
    return _load_result(aggregator, aggregator.load(path))


@app.post("/load-text", response_model=LoadStatus)
def load_text(payload: LoadTextRequest, request: Request) -> LoadStatus:
    aggregator = get_aggregator(request)
    return _load_result(aggregator, aggregator.load_from_text(payload.text))


@app.post("/clear", response_model=LoadStatus)
def clear(request: Request) -> LoadStatus:
    aggregator = get_aggregator(request)
    aggregator.clear()
    return aggregator.status()


@app.get("/metrics", response_model=List[UsageRecord])
def metrics(request: Request) -> List[UsageRecord]:
    return list(get_aggregator(request).records)


@app.get("/users", response_model=List[UserSummary])
def users(request: Request) -> List[UserSummary]:
    return get_aggregator(request).users_summary()


@app.get("/users/{user_login}", response_model=UserDetail)
def user_detail(user_login: str, request: Request) -> UserDetail:
    aggregator = get_aggregator(request)
    summary = aggregator.user_summary(user_login)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"No metrics found for user '{user_login}'.")
    return UserDetail(summary=summary, records=aggregator.get_user_metrics(user_login))


@app.get("/daily", response_model=List[DailyMetrics])
def daily(request: Request) -> List[DailyMetrics]:
    return get_aggregator(request).daily_metrics()


@app.get("/features", response_model=List[FeatureMetrics])
def features(request: Request) -> List[FeatureMetrics]:
    return get_aggregator(request).feature_metrics()


@app.get("/ides", response_model=List[IdeMetrics])
def ides(request: Request) -> List[IdeMetrics]:
    return get_aggregator(request).ide_metrics()


@app.get("/languages", response_model=List[LanguageMetrics])
def languages(request: Request) -> List[LanguageMetrics]:
    return get_aggregator(request).language_metrics()


@app.get("/global", response_model=GlobalStats)
def global_stats(request: Request) -> GlobalStats:
    return get_aggregator(request).global_stats()


@app.get("/charts/{name}", response_model=ChartData)
def chart(name: str, request: Request) -> ChartData:
    if name not in CHART_BUILDERS:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown chart '{name}'. Available: {', '.join(sorted(CHART_BUILDERS))}.",
        )
    return build_chart(name, get_aggregator(request))
