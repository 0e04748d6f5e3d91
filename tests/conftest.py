"""Shared fixtures: fake chat model, assistant and Flask test app."""

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from smartshop.assistant import ChatRepository, ShoppingAssistant, create_recommendation_agent
from smartshop.auth import AuthConfig, UserStore
from smartshop.core.config import ChatConfig, Config
from smartshop.web.app import REGISTRY_KEY, create_app

RECOMMENDATIONS = [
    "Added milk. Oat milk is on sale this week.",
    "Added eggs. Bacon goes well with them.",
]


@pytest.fixture
def chat_model():
    return FakeListChatModel(responses=list(RECOMMENDATIONS))


@pytest.fixture
def chats():
    return ChatRepository()


@pytest.fixture
def assistant(chat_model, chats):
    return ShoppingAssistant(create_recommendation_agent(chat_model), chats)


@pytest.fixture
def test_config():
    return Config(
        chat=ChatConfig(debounce_seconds=0.01, stream_poll_interval=0.01, max_open_chats=5)
    )


@pytest.fixture
def users():
    return UserStore()


@pytest.fixture
def app(test_config, assistant, users):
    app = create_app(
        test_config,
        assistant=assistant,
        users=users,
        auth_config=AuthConfig(secret="test-secret"),
    )
    app.config["TESTING"] = True
    yield app
    registry = app.extensions[REGISTRY_KEY]
    registry.close_all()
    registry.loop_thread.stop()


@pytest.fixture
def client(app):
    return app.test_client()
