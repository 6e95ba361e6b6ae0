"""Conversational assistant endpoint."""

from fastapi import APIRouter

from credit_report.controllers.dependencies import ChatServiceDep
from credit_report.views import ChatRequest, ChatResponse

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def chat(payload: ChatRequest, service: ChatServiceDep) -> ChatResponse:
    message = await service.generate_response(payload.message)
    return ChatResponse.model_validate(message)
