from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from inventory_api.models.database import get_db
from inventory_api.models.users import User
from inventory_api.schemas.chat import ChatRequest, ChatResponse
from inventory_api.services.ai_client import TextGenerator
from inventory_api.services.chat import ChatService
from inventory_api.services.memory import ConversationMemory
from inventory_api.api.deps import get_conversation_memory, get_current_user, get_text_generator

router = APIRouter()

@router.post("/chatbot", response_model=ChatResponse)
def chatbot(
    request: ChatRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    memory: ConversationMemory = Depends(get_conversation_memory),
    generator: TextGenerator = Depends(get_text_generator)
):
    """
    Ask a question about your inventory.
    The service will:
    1. Refuse questions unrelated to the caller's products
    2. Answer from a snapshot of the caller's products and the recent conversation
    3. Remember the exchange for follow-up questions
    """
    chat_service = ChatService(db, generator, memory)
    return ChatResponse(reply=chat_service.answer(current_user.id, request.prompt))
