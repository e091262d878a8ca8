"""Tests for environment-driven Settings"""

from resilient_http import ResilientHttpClient


class TestSettings:
    def test_defaults(self):
        from resilient_http.config import Settings

        settings = Settings(_env_file=None)
        assert settings.max_attempts == 5
        assert settings.retry_wait == 1.0
        assert settings.permits_per_period == 5
        assert settings.rate_limit_period == 1.0
        assert settings.acquire_timeout == 1.0
        assert settings.connect_timeout == 10.0
        assert settings.request_timeout == 10.0

    def test_reads_prefixed_environment(self, monkeypatch):
        from resilient_http.config import Settings

        monkeypatch.setenv("RESILIENT_HTTP_BASE_URL", "https://fipe.example.com/api/")
        monkeypatch.setenv("RESILIENT_HTTP_MAX_ATTEMPTS", "3")
        monkeypatch.setenv("RESILIENT_HTTP_RATE_LIMIT_ENABLED", "false")

        settings = Settings(_env_file=None)
        assert settings.base_url == "https://fipe.example.com/api/"
        assert settings.max_attempts == 3
        assert settings.rate_limit_enabled is False

    def test_to_client_config(self):
        from resilient_http.config import Settings

        settings = Settings(_env_file=None, base_url="https://x.test/", permits_per_period=2, retry_wait=0.5)
        config = settings.to_client_config()

        assert config.base_url == "https://x.test"
        assert config.permits_per_period == 2
        assert config.retry_wait == 0.5

    def test_to_client_config_overrides(self):
        from resilient_http.config import Settings

        config = Settings(_env_file=None).to_client_config(max_attempts=1)
        assert config.max_attempts == 1

    def test_client_from_settings(self):
        from resilient_http.config import Settings

        settings = Settings(_env_file=None, max_attempts=2, acquire_timeout=0.25)
        with ResilientHttpClient.from_settings(settings) as client:
            assert client.policy.retry_policy.max_attempts == 2
            assert client.policy.rate_limiter.acquire_timeout == 0.25
