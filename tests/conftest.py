"""Shared test fixtures."""
import pytest
from unittest.mock import AsyncMock
from fruttagest.llm.base import LLMClient
from fruttagest.config import Settings
from fruttagest.prompts.registry import PromptRegistry
from tests.factories import make_catalog, make_llm_response


@pytest.fixture
def mock_settings():
    """Create test settings with dummy values."""
    return Settings(
        azure_ai_endpoint="https://test.eastus2.models.ai.azure.com",
        azure_ai_api_key="test-azure-ai-key",
        azure_openai_endpoint="https://test.openai.azure.com",
        azure_openai_api_key="test-azure-openai-key",
        openai_api_key="test-openai-key",
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
def mock_llm_client():
    """Create a mock LLM client answering with a two-line order."""
    client = AsyncMock(spec=LLMClient)
    client.get_model_name.return_value = "mock-model"
    response = make_llm_response({
        "items": [
            {"productName": "pomodori san marzano", "quantity": 5, "unit": "KG"},
            {"productName": "basilico", "quantity": 2, "unit": "mazzi"},
        ],
        "customerName": "Trattoria Da Mario",
        "deliveryDate": "2026-10-21",
        "notes": "consegna entro le 8",
    })
    client.complete_text.return_value = response
    client.complete_vision.return_value = response
    return client


@pytest.fixture
def prompt_registry():
    return PromptRegistry()


@pytest.fixture
def catalog():
    return make_catalog(
        "Basilico",
        "Mele Golden",
        "Pomodori San Marzano",
        "Pomodoro",
        "Pomodoro Cuore di Bue",
        "Zucchine",
    )
