import pytest

STORYFORGE_ENV = ("STORYFORGE_BACKEND_URL", "STORYFORGE_ORIGIN", "STORYFORGE_TIMEOUT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop STORYFORGE_* variables so a developer's .env never leaks into tests."""
    for name in STORYFORGE_ENV:
        monkeypatch.delenv(name, raising=False)
    yield
