"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from credit_report.config.dependencies import ServiceContainer
from credit_report.pipelines.report import ReportPipeline
from credit_report.services.chat import ChatService


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


ContainerDep = Annotated[ServiceContainer, Depends(get_container)]


def get_report_pipeline(container: ContainerDep) -> ReportPipeline:
    """Build a pipeline around the process-wide adapter and store."""

    return container.report_pipeline()


def get_chat_service(container: ContainerDep) -> ChatService:
    return container.chat_service()


ReportPipelineDep = Annotated[ReportPipeline, Depends(get_report_pipeline)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]


__all__ = [
    "ChatServiceDep",
    "ContainerDep",
    "ReportPipelineDep",
    "get_chat_service",
    "get_container",
    "get_report_pipeline",
]
