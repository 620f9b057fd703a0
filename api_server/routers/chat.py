"""
Chat router for the API server
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger

from api_server.models import ChatRequest, ChatResponse, SessionInfo, ToolInfo
from api_server.services.chat_service import ChatService
from orchestrator.exceptions import ChatError

router = APIRouter()


def get_chat_service(request: Request) -> ChatService:
    service = getattr(request.app.state, "chat_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Chat service is not initialized",
        )
    return service


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, service: ChatService = Depends(get_chat_service)):
    """
    Send a message to the assistant
    """
    logger.info(f"Processing chat message for session {request.session_id or '(new)'}")

    try:
        session_id, answer = await service.chat(request.message, request.session_id)
    except ChatError as e:
        logger.error(f"Error processing chat message: {str(e)}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return ChatResponse(session_id=session_id, answer=answer)


@router.get("/sessions/{session_id}", response_model=SessionInfo)
async def get_session(session_id: str, service: ChatService = Depends(get_chat_service)):
    orchestrator = service.sessions.get(session_id)
    if orchestrator is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")

    return SessionInfo(
        session_id=session_id,
        turns=len(orchestrator.history),
        servers=list(orchestrator.connections),
    )


@router.get("/sessions/{session_id}/tools", response_model=List[ToolInfo])
async def list_tools(session_id: str, service: ChatService = Depends(get_chat_service)):
    orchestrator = service.sessions.get(session_id)
    if orchestrator is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")

    return [
        ToolInfo(
            name=tool.name,
            description=tool.description,
            server_id=tool.server_id,
            input_schema=tool.input_schema,
        )
        for tool in orchestrator.list_tools()
    ]


@router.delete("/sessions/{session_id}")
async def end_session(session_id: str, service: ChatService = Depends(get_chat_service)):
    if not service.end_session(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return {"status": "success", "message": f"Session '{session_id}' ended"}
