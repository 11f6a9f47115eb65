"""Request dependencies shared by the API routers."""

from fastapi import Request

from src.api.metrics import MetricsService
from src.personalization.engine import EngineFacade


def get_engine(request: Request) -> EngineFacade:
    return request.app.state.engine


def get_metrics(request: Request) -> MetricsService:
    return request.app.state.metrics
