"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from speechcoach.pipelines.analysis import AnalysisPipeline
from speechcoach.services.result_store import ResultStore


def get_result_store(request: Request) -> ResultStore:
    """Return the store created by the app factory."""

    return request.app.state.result_store


def get_analysis_pipeline(request: Request) -> AnalysisPipeline:
    """Return the pipeline created by the app factory."""

    return request.app.state.analysis_pipeline


ResultStoreDep = Annotated[ResultStore, Depends(get_result_store)]
AnalysisPipelineDep = Annotated[AnalysisPipeline, Depends(get_analysis_pipeline)]


__all__ = [
    "AnalysisPipelineDep",
    "ResultStoreDep",
    "get_analysis_pipeline",
    "get_result_store",
]
