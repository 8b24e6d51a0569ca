from sqlalchemy.orm import Session
from typing import Optional, Sequence
import logging

from inventory_api.models.products import Product
from inventory_api.core.exceptions import (
    AppError, AIQueryError, ConfigurationError, ServiceUnavailableError, ValidationError
)
from inventory_api.services.ai_client import TextGenerator
from inventory_api.services.memory import ConversationMemory, Exchange
from inventory_api.services.products import ProductService
from inventory_api.services.relevance import REFUSAL_MESSAGE, RelevanceGate

logger = logging.getLogger(__name__)

EMPTY_INVENTORY = "No products found in inventory."

def _format_price(value: Optional[float]) -> str:
    return f"{value or 0:,.2f}"

def build_inventory_context(products: Sequence[Product]) -> str:
    """Flatten the user's products into one line each for the prompt."""
    if not products:
        return EMPTY_INVENTORY

    lines = []
    for product in products:
        category = product.category.value if product.category else "Uncategorized"
        lines.append(
            f"- {product.name}: {product.description or 'No description'} "
            f"(Category: {category}, Quantity: {product.quantity or 0}, "
            f"Price: ${_format_price(product.unit_price)}, "
            f"Active: {'No' if product.is_active is False else 'Yes'})"
        )
    return "User's Product Inventory:\n" + "\n".join(lines)

def build_conversation_context(history: Sequence[Exchange]) -> str:
    if not history:
        return ""
    lines = "\n".join(f"User: {ex.user}\nBot: {ex.bot}" for ex in history)
    return f"\nRecent Conversation:\n{lines}\n"

def build_prompt(question: str, inventory_context: str, history: Sequence[Exchange]) -> str:
    return (
        "You are a friendly and helpful chatbot assistant for a product inventory system. "
        "Answer the user's question about their products in a conversational, single-line response.\n\n"
        f"{inventory_context}\n"
        f"{build_conversation_context(history)}\n"
        f"Current User Question: {question}\n\n"
        "Instructions:\n"
        "- Answer in exactly ONE line like a chatbot would\n"
        "- Be friendly, conversational, and helpful\n"
        "- Use the conversation history to understand context and follow-up questions\n"
        '- Keep it concise but natural (like "You have 10 electronics items worth $5,000 total!")\n'
        "- Only mention products that appear in the inventory above; never invent products\n"
        "- If they ask about products they don't have, politely mention they don't have those items\n"
        "- Use a warm, helpful tone like you're talking to a friend\n"
        "- Don't use bullet points or multiple sentences - just one friendly line\n\n"
        "Response:"
    )

class ChatService:
    """Answers free-text questions about one user's inventory."""

    def __init__(self, db: Session, generator: TextGenerator, memory: ConversationMemory):
        self.db = db
        self.generator = generator
        self.memory = memory
        self.gate = RelevanceGate(generator)
        self.product_service = ProductService(db)

    def answer(self, user_id: Optional[str], prompt: Optional[str]) -> str:
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValidationError("Valid prompt is required")
        if not user_id:
            raise ValidationError("User ID is required")
        question = prompt.strip()

        # Held until the exchange is recorded so concurrent questions from the
        # same user are answered one after another.
        with self.memory.lock(user_id):
            history = self.memory.history(user_id)

            if not self.gate.is_relevant(question, history):
                self.memory.append(user_id, question, REFUSAL_MESSAGE)
                return REFUSAL_MESSAGE

            products = self.product_service.list_products(user_id)
            full_prompt = build_prompt(question, build_inventory_context(products), history)
            reply = self._generate(full_prompt)

            self.memory.append(user_id, question, reply)
            return reply

    def _generate(self, full_prompt: str) -> str:
        try:
            text = self.generator.generate(full_prompt)
        except (ServiceUnavailableError, ConfigurationError):
            raise
        except AppError as exc:
            logger.error("AI query failed: %s", exc.detail)
            raise AIQueryError() from exc
        except Exception as exc:
            logger.exception("Unexpected error while generating a reply")
            raise AIQueryError() from exc
        return text.strip()
