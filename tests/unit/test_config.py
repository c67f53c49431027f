"""Tests for fetcher configuration."""

import pytest
from pydantic import ValidationError

from jsr_registry.config import DEFAULT_HOST, DEFAULT_NPM_COMP_HOST, FetcherConfig
from jsr_registry.info import GetProviderScope


class TestFetcherConfig:
    """Test host and provider scope settings."""

    def test_defaults(self):
        """Should point at the public registry."""
        config = FetcherConfig()
        assert config.host == DEFAULT_HOST == "https://jsr.io/"
        assert config.npm_comp_host == DEFAULT_NPM_COMP_HOST == "https://npm.jsr.io/"
        assert config.provider_scope == "jsr"
        assert config.timeout == 30.0

    def test_trailing_slash_is_added(self):
        """Should keep the base path when joining."""
        config = FetcherConfig(host="https://example.com/registry")
        assert config.host == "https://example.com/registry/"

    @pytest.mark.parametrize("host", ["ftp://example.com/", "/relative", "example.com"])
    def test_rejects_non_http_hosts(self, host):
        """Should only accept absolute http(s) URLs."""
        with pytest.raises(ValidationError):
            FetcherConfig(host=host)

    @pytest.mark.parametrize("scope", ["", "@jsr", "jsr/extra"])
    def test_rejects_malformed_provider_scope(self, scope):
        """Should require a bare scope name."""
        with pytest.raises(ValidationError):
            FetcherConfig(provider_scope=scope)

    def test_is_immutable(self):
        """Should not allow changes after construction."""
        config = FetcherConfig()
        with pytest.raises(ValidationError):
            config.provider_scope = "other"

    def test_exposes_provider_scope(self):
        """Should satisfy the GetProviderScope protocol."""
        config = FetcherConfig(provider_scope="corp")
        assert isinstance(config, GetProviderScope)
        assert config.get_provider_scope() == "corp"
