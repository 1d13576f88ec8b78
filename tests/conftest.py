"""
Shared fixtures: temporary storage and a fake Gemini SDK client.
"""

import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


class FakeModels:
    """Stands in for google.genai.Client.models."""

    def __init__(self, text=None, exc=None):
        self.text = text
        self.exc = exc
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append({"model": model, "contents": contents})
        if self.exc is not None:
            raise self.exc
        return SimpleNamespace(text=self.text)


class FakeGenAIClient:
    def __init__(self, text="**Jawaban:** $x = 2$", exc=None):
        self.models = FakeModels(text, exc)


@pytest.fixture
def fake_genai():
    return FakeGenAIClient()


@pytest.fixture
def make_fake_genai():
    """Factory for fake clients with a given answer or exception."""
    return FakeGenAIClient


@pytest.fixture
def storage(tmp_path):
    from edusolver.utils.storage import LocalStorage

    return LocalStorage(tmp_path / "storage.db")


@pytest.fixture
def config(tmp_path):
    from edusolver.utils.config import AppConfig

    return AppConfig(data_dir=tmp_path)


@pytest.fixture
def make_session(config, storage):
    """Build a HomeworkSession whose solvers talk to the given fake client."""
    from edusolver.session import HomeworkSession
    from edusolver.solvers.gemini import GeminiClient

    def _make(fake=None, api_key="test-key"):
        fake = fake or FakeGenAIClient()
        session = HomeworkSession(
            config,
            storage,
            client_factory=lambda key: GeminiClient(key, config.model_name, client=fake),
        )
        if api_key:
            session.set_api_key(api_key)
        return session

    return _make
