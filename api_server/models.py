"""
Request and response models for the chat API
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    session_id: Optional[str] = None


class ChatResponse(BaseModel):
    session_id: str
    answer: str


class ToolInfo(BaseModel):
    name: str
    description: str
    server_id: str
    input_schema: Dict[str, Any]


class SessionInfo(BaseModel):
    session_id: str
    turns: int
    servers: List[str]
