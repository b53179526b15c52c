"""Tests for configuration and input validation."""

import pytest

from hn_inbox.core.config import (
    CacheConfig, Config, HackerNewsConfig, PrefetchConfig, SummarizerConfig, env_bool, env_int
)
from hn_inbox.core.errors import ConfigError
from hn_inbox.core.validators import CredentialValidator, FilterValidator


class TestEnvHelpers:

    def test_env_bool(self, monkeypatch):
        monkeypatch.setenv('HN_TEST_FLAG', 'yes')
        assert env_bool('HN_TEST_FLAG') is True
        monkeypatch.setenv('HN_TEST_FLAG', 'off')
        assert env_bool('HN_TEST_FLAG', True) is False
        monkeypatch.delenv('HN_TEST_FLAG')
        assert env_bool('HN_TEST_FLAG', True) is True

    def test_env_int(self, monkeypatch):
        monkeypatch.setenv('HN_TEST_INT', '12')
        assert env_int('HN_TEST_INT', 3) == 12
        assert env_int('HN_TEST_UNSET', 3) == 3


class TestConfigValidation:

    def test_defaults_are_valid(self):
        config = Config(summarizer=SummarizerConfig(api_key=''), log_level='INFO')
        config.validate()
        assert config.hacker_news.top_stories_limit == 100
        assert config.summarizer.model == 'claude-haiku-4-5-20251001'

    def test_bad_api_key_prefix(self):
        with pytest.raises(ValueError, match="sk-ant-"):
            SummarizerConfig(api_key='sk-openai').validate()

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValueError):
            HackerNewsConfig(max_concurrency=0).validate()
        with pytest.raises(ValueError, match="PREFETCH_MAX_CONCURRENCY"):
            PrefetchConfig(max_concurrency=0).validate()

    def test_cache_limits_must_be_non_negative(self):
        with pytest.raises(ValueError):
            CacheConfig(ttl_seconds=-1).validate()

    def test_log_level(self):
        config = Config(summarizer=SummarizerConfig(api_key=''), log_level='LOUD')
        with pytest.raises(ValueError, match="LOG_LEVEL"):
            config.validate()


class TestCredentialValidator:

    def test_trims_valid_key(self):
        assert CredentialValidator.validate_api_key('  sk-ant-abc  ') == 'sk-ant-abc'

    def test_empty_key(self):
        with pytest.raises(ConfigError, match="Please enter an API key"):
            CredentialValidator.validate_api_key('   ')

    def test_wrong_prefix(self):
        with pytest.raises(ConfigError, match="Invalid API key format"):
            CredentialValidator.validate_api_key('sk-proj-123')


class TestFilterValidator:

    def test_normalizes_bad_values(self):
        assert FilterValidator.normalize({'minPoints': '-5', 'minComments': 'many',
                                          'timeRange': 'decade'}) == {
            'minPoints': 0, 'minComments': 0, 'timeRange': 'all'
        }

    def test_keeps_good_values(self):
        settings = {'minPoints': 50, 'minComments': '10', 'timeRange': '3days'}
        assert FilterValidator.normalize(settings) == {
            'minPoints': 50, 'minComments': 10, 'timeRange': '3days'
        }
