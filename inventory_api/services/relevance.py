import logging
from typing import Sequence

from inventory_api.services.ai_client import TextGenerator
from inventory_api.services.memory import Exchange

logger = logging.getLogger(__name__)

REFUSAL_MESSAGE = (
    "I'm sorry, but I can only help you with questions about your products and inventory. "
    "Please ask me something related to your products!"
)

CLASSIFICATION_CONTEXT_SIZE = 2


def build_classification_prompt(query: str, history: Sequence[Exchange]) -> str:
    recent = list(history)[-CLASSIFICATION_CONTEXT_SIZE:]
    context = ""
    if recent:
        lines = "\n".join(f"User: {ex.user}\nBot: {ex.bot}" for ex in recent)
        context = f"\nRecent conversation context:\n{lines}\n"

    return (
        "Analyze this user query and determine if it's related to products, inventory, items, or business goods.\n"
        "Consider the conversation context for follow-up questions.\n"
        f"{context}\n"
        f'Current Query: "{query}"\n\n'
        'Respond with only "YES" if the query is about products/inventory/items/goods '
        "(including follow-up questions about previously discussed products), "
        'or "NO" if it\'s about something else entirely.\n'
        "Do not provide any explanation, just YES or NO."
    )


class RelevanceGate:
    """
    Decides whether a query should be answered from the user's inventory.

    This only shapes the conversation; it is not an access check. Any failure of
    the classification call lets the query through.
    """

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    def is_follow_up(self, history: Sequence[Exchange]) -> bool:
        return bool(history) and history[-1].bot != REFUSAL_MESSAGE

    def is_relevant(self, query: str, history: Sequence[Exchange]) -> bool:
        if self.is_follow_up(history):
            logger.debug("Treating query as a follow-up to the previous answer")
            return True

        prompt = build_classification_prompt(query, history)
        try:
            verdict = self.generator.generate(prompt)
        except Exception:
            logger.warning("Relevance check failed, allowing query", exc_info=True)
            return True

        relevant = verdict.strip().upper() == "YES"
        logger.info("Relevance gate verdict: %s", "relevant" if relevant else "refused")
        return relevant
