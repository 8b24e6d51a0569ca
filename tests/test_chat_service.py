import threading

import pytest

from inventory_api.core.exceptions import (
    AIQueryError, ConfigurationError, ServiceUnavailableError, ValidationError
)
from inventory_api.models.products import Product, ProductCategory
from inventory_api.models.users import User
from inventory_api.services.chat import (
    EMPTY_INVENTORY, ChatService, build_conversation_context, build_inventory_context
)
from inventory_api.services.ai_client import TextGenerator
from inventory_api.services.memory import Exchange
from inventory_api.services.relevance import REFUSAL_MESSAGE


@pytest.fixture
def owners(db_session):
    alice = User(username="alice", email="a@x.com", password_hash="x")
    bob = User(username="bob", email="b@x.com", password_hash="x")
    db_session.add_all([alice, bob])
    db_session.commit()

    for owner, name in ((alice, "Widget"), (bob, "Secret Gadget")):
        product = Product(name=name, category=ProductCategory.ELECTRONICS,
                          quantity=10, unit_price=2.5, owner_id=owner.id)
        product.refresh_total_value()
        db_session.add(product)
    db_session.commit()
    return alice, bob


@pytest.fixture
def chat(db_session, generator, memory):
    return ChatService(db_session, generator, memory)


@pytest.mark.parametrize("prompt", [None, "", "   \n\t"])
def test_rejects_blank_prompt(chat, prompt):
    with pytest.raises(ValidationError) as excinfo:
        chat.answer("u1", prompt)
    assert excinfo.value.detail == "Valid prompt is required"


def test_requires_user(chat):
    with pytest.raises(ValidationError) as excinfo:
        chat.answer(None, "What do I have?")
    assert excinfo.value.detail == "User ID is required"


def test_answer_is_trimmed_and_recorded(chat, generator, memory, owners):
    alice, _ = owners
    generator.replies.append("  You have 10 Widgets!  \n")

    assert chat.answer(alice.id, "  What do I have?  ") == "You have 10 Widgets!"
    assert memory.history(alice.id) == [Exchange(user="What do I have?", bot="You have 10 Widgets!")]


def test_prompt_only_contains_callers_inventory(chat, generator, owners):
    alice, _ = owners
    chat.answer(alice.id, "What do I have?")

    prompt = generator.reply_prompts[0]
    assert "Widget" in prompt
    assert "Secret Gadget" not in prompt
    assert "Current User Question: What do I have?" in prompt
    assert "never invent products" in prompt


def test_follow_up_is_not_reclassified(chat, generator, owners):
    alice, _ = owners
    chat.answer(alice.id, "What do I have?")
    chat.answer(alice.id, "What about the price?")

    assert len(generator.classification_prompts) == 1
    assert len(generator.reply_prompts) == 2
    assert "User: What do I have?" in generator.reply_prompts[1]


def test_irrelevant_query_is_refused_and_recorded(chat, generator, memory, owners):
    alice, _ = owners
    generator.verdicts.append("NO")

    assert chat.answer(alice.id, "Write me a poem") == REFUSAL_MESSAGE
    assert generator.reply_prompts == []
    assert memory.history(alice.id)[-1] == Exchange(user="Write me a poem", bot=REFUSAL_MESSAGE)

    # A refusal is not a basis for the follow-up shortcut
    generator.verdicts.append("YES")
    chat.answer(alice.id, "How many widgets?")
    assert len(generator.classification_prompts) == 2


def test_six_queries_keep_latest_five(chat, memory, owners):
    alice, _ = owners
    for i in range(6):
        chat.answer(alice.id, f"question {i}")

    assert [ex.user for ex in memory.history(alice.id)] == [f"question {i}" for i in range(1, 6)]


@pytest.mark.parametrize("error", [ServiceUnavailableError(), ConfigurationError()])
def test_unavailable_errors_propagate(chat, generator, memory, owners, error):
    alice, _ = owners
    generator.replies.append(error)

    with pytest.raises(type(error)):
        chat.answer(alice.id, "What do I have?")
    assert memory.history(alice.id) == []


def test_other_errors_become_generic_failure(chat, generator, memory, owners):
    alice, _ = owners
    generator.replies.append(RuntimeError("boom"))

    with pytest.raises(AIQueryError):
        chat.answer(alice.id, "What do I have?")
    assert memory.history(alice.id) == []


def test_inventory_context_format():
    products = [
        Product(name="Widget", description="", category=ProductCategory.ELECTRONICS,
                quantity=10, unit_price=2.5, is_active=True),
        Product(name="Novel", description="Paperback", category=ProductCategory.BOOKS,
                quantity=0, unit_price=1234.5, is_active=False),
    ]
    context = build_inventory_context(products)

    assert context.splitlines() == [
        "User's Product Inventory:",
        "- Widget: No description (Category: electronics, Quantity: 10, Price: $2.50, Active: Yes)",
        "- Novel: Paperback (Category: books, Quantity: 0, Price: $1,234.50, Active: No)",
    ]


def test_empty_inventory_context():
    assert build_inventory_context([]) == EMPTY_INVENTORY


def test_conversation_context_format():
    history = [Exchange(user="hi", bot="hello"), Exchange(user="stock?", bot="10 widgets")]
    assert build_conversation_context(history) == (
        "\nRecent Conversation:\nUser: hi\nBot: hello\nUser: stock?\nBot: 10 widgets\n"
    )
    assert build_conversation_context([]) == ""


class GatedTextGenerator(TextGenerator):
    """Holds the first answer generation until ``release`` is set."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.reply_prompts = []

    def generate(self, prompt: str) -> str:
        if prompt.lstrip().startswith("Analyze this user query"):
            return "YES"
        self.reply_prompts.append(prompt)
        if len(self.reply_prompts) == 1:
            self.entered.set()
            self.release.wait(timeout=5)
        return f"answer {len(self.reply_prompts)}"


def test_same_user_questions_are_answered_one_at_a_time(session_factory, memory, owners):
    alice, _ = owners
    alice_id = alice.id
    generator = GatedTextGenerator()
    errors = []

    def ask(question):
        db = session_factory()
        try:
            ChatService(db, generator, memory).answer(alice_id, question)
        except Exception as exc:
            errors.append(exc)
        finally:
            db.close()

    first = threading.Thread(target=ask, args=("What do I have?",))
    second = threading.Thread(target=ask, args=("How many widgets?",))
    first.start()
    assert generator.entered.wait(timeout=5)

    second.start()
    second.join(timeout=0.3)
    # The second question waits while the first one is still being answered
    assert second.is_alive()
    assert len(generator.reply_prompts) == 1

    generator.release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert errors == []
    assert memory.history(alice_id) == [
        Exchange(user="What do I have?", bot="answer 1"),
        Exchange(user="How many widgets?", bot="answer 2"),
    ]
    assert "User: What do I have?\nBot: answer 1" in generator.reply_prompts[1]
