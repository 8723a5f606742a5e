"""Chat API endpoint.

Routes:
- POST /api/chat - Answer one course question

A body that is not a JSON object with a string ``message`` gets the same 400
as an empty message, not FastAPI's 422 shape.

Dependencies: course_assistant.application.services.chat_service
System role: Chat messaging HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from course_assistant.api.deps import get_chat_service
from course_assistant.application.services.chat_service import EMPTY_MESSAGE_ERROR, ChatService
from course_assistant.core.exceptions import GenerationError, ValidationError
from course_assistant.models.chat import ChatRequest, ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

GENERATION_FAILED_ERROR = "Error al generar respuesta"

router = APIRouter(prefix="/api", tags=["chat"])


def session_key(request: Request, x_session_id: str | None) -> str:
    """Session key from the X-Session-ID header, else the client host."""
    if x_session_id and x_session_id.strip():
        return x_session_id.strip()
    if request.client is not None:
        return request.client.host
    return "anonymous"


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(
    request: Request,
    body: ChatRequest,
    x_session_id: str | None = Header(default=None),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatResponse | JSONResponse:
    """Answer a chat message.

    Args:
        request: Incoming request (client host fallback for the session key)
        body: ChatRequest with the user message
        x_session_id: Optional session identifier header
        chat_service: Injected ChatService

    Returns:
        ChatResponse: Answer text, or an ErrorResponse body on 400/500
    """
    key = session_key(request, x_session_id)
    logger.info(f"{__name__}:chat - START session_key={key}")

    try:
        answer = await chat_service.process_chat(key, body.message)
    except ValidationError as e:
        logger.info(f"{__name__}:chat - Rejected: {e.details}")
        return JSONResponse(status_code=400, content=ErrorResponse(error=e.message).model_dump())
    except GenerationError as e:
        logger.error(f"{__name__}:chat - GenerationError: {e}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=GENERATION_FAILED_ERROR).model_dump(),
        )
    except Exception as e:
        logger.exception(f"{__name__}:chat - {type(e).__name__}: {e}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=GENERATION_FAILED_ERROR).model_dump(),
        )

    return ChatResponse(message=answer)


async def chat_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map malformed chat bodies to the chat error contract; other routes keep FastAPI's 422."""
    if request.scope.get("endpoint") is not chat:
        return await request_validation_exception_handler(request, exc)

    logger.info(f"{__name__}:chat - Rejected malformed body: {len(exc.errors())} error(s)")
    return JSONResponse(status_code=400, content=ErrorResponse(error=EMPTY_MESSAGE_ERROR).model_dump())
