import pytest

from buildscope.analysis import reset_services
from buildscope.config import get_settings
from buildscope.main import app
from buildscope.main import limiter as app_limiter
from buildscope.routes.api.analysis import _limiter as analysis_limiter
from buildscope.routes.health import reset_metrics


@pytest.fixture(autouse=True)
def test_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("SPEED_TEST_URL", "https://speed.test.local/bytes/1048576")
    monkeypatch.setenv("RATE_LIMIT_ANALYSES_PER_MINUTE", "1000")
    monkeypatch.setenv("MAX_UPLOAD_CHARS", "5000")
    get_settings.cache_clear()
    reset_services()
    reset_metrics()
    analysis_limiter.reset()
    app_limiter.reset()
    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()
    reset_services()
    get_settings.cache_clear()
