from pydantic import BaseModel, Field
from typing import Optional

class ChatRequest(BaseModel):
    prompt: Optional[str] = Field(None, max_length=4096, description="Question about the caller's inventory")

class ChatResponse(BaseModel):
    reply: str
