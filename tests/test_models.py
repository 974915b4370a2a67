"""
Tests for the connection models: RetryPolicy, PoolOptions, ConnectionConfig
and ConnectionAttemptResult.
"""
import pytest
from pydantic import ValidationError

from connection_management import (
    ConnectionAttemptResult,
    ConnectionConfig,
    ConnectionError,
    ConnectionStatus,
    PoolOptions,
    RetryPolicy,
)


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_defaults(self):
        policy = RetryPolicy()

        assert policy.max_attempts == 5
        assert policy.base_interval_ms == 5000
        assert policy.backoff_factor == 1.5

    def test_backoff_grows_exponentially(self):
        policy = RetryPolicy(base_interval_ms=100, backoff_factor=2)

        assert [policy.backoff_ms(k) for k in (1, 2, 3)] == [100, 200, 400]

    def test_first_backoff_is_base_interval(self):
        policy = RetryPolicy(base_interval_ms=50, backoff_factor=1.5)

        assert policy.backoff_ms(1) == 50
        assert policy.backoff_ms(2) == pytest.approx(75)

    def test_backoff_rejects_attempt_zero(self):
        with pytest.raises(ValueError):
            RetryPolicy().backoff_ms(0)

    @pytest.mark.parametrize("field,value", [
        ("max_attempts", 0),
        ("base_interval_ms", -1),
        ("backoff_factor", 0.5),
    ])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            RetryPolicy(**{field: value})

    def test_policy_is_immutable(self):
        policy = RetryPolicy()

        with pytest.raises(ValidationError):
            policy.max_attempts = 2

    def test_merged_applies_only_explicit_fields(self):
        defaults = RetryPolicy(max_attempts=5, base_interval_ms=5000, backoff_factor=1.5)

        merged = defaults.merged(RetryPolicy(max_attempts=3))

        assert merged == RetryPolicy(max_attempts=3, base_interval_ms=5000, backoff_factor=1.5)

    def test_merged_with_none_returns_defaults(self):
        defaults = RetryPolicy(max_attempts=2)

        assert defaults.merged(None) is defaults

    def test_merged_from_parsed_partial_mapping(self):
        config = ConnectionConfig.model_validate(
            {"uri": "mongodb://x", "retry_policy": {"base_interval_ms": 10}}
        )

        merged = RetryPolicy(max_attempts=7).merged(config.retry_policy)

        assert merged.max_attempts == 7
        assert merged.base_interval_ms == 10


class TestPoolOptions:
    """Tests for PoolOptions."""

    def test_driver_option_names_accepted_as_aliases(self):
        options = PoolOptions.model_validate({
            "minPoolSize": 1,
            "maxPoolSize": 4,
            "serverSelectionTimeoutMS": 1000,
            "socketTimeoutMS": 2000,
        })

        assert options.min_pool_size == 1
        assert options.max_pool_size == 4
        assert options.server_selection_timeout_ms == 1000
        assert options.socket_timeout_ms == 2000

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            PoolOptions.model_validate({"maxPoolSize": 4, "tls": True})

    def test_negative_sizes_rejected(self):
        with pytest.raises(ValidationError):
            PoolOptions(max_pool_size=-1)

    def test_driver_options_cannot_shadow_typed_fields(self):
        with pytest.raises(ValidationError):
            PoolOptions(driver_options={"maxPoolSize": 100})

    def test_to_driver_kwargs_uses_driver_names_and_skips_unset(self):
        options = PoolOptions(max_pool_size=4, socket_timeout_ms=100, driver_options={"appname": "api"})

        assert options.to_driver_kwargs() == {
            "maxPoolSize": 4,
            "socketTimeoutMS": 100,
            "appname": "api",
        }

    def test_with_defaults_fills_unset_fields(self):
        defaults = PoolOptions(
            min_pool_size=2, max_pool_size=10,
            server_selection_timeout_ms=5000, socket_timeout_ms=45000,
        )

        result = PoolOptions(max_pool_size=4).with_defaults(defaults)

        assert result == PoolOptions(
            min_pool_size=2, max_pool_size=4,
            server_selection_timeout_ms=5000, socket_timeout_ms=45000,
        )

    def test_with_defaults_keeps_explicit_zero(self):
        defaults = PoolOptions(min_pool_size=2, max_pool_size=10)

        result = PoolOptions(min_pool_size=0).with_defaults(defaults)

        assert result.min_pool_size == 0
        assert result.max_pool_size == 10

    def test_with_defaults_merges_driver_options(self):
        defaults = PoolOptions(driver_options={"appname": "default", "retryWrites": True})

        result = PoolOptions(driver_options={"appname": "reports"}).with_defaults(defaults)

        assert result.driver_options == {"appname": "reports", "retryWrites": True}


class TestConnectionConfig:
    """Tests for ConnectionConfig."""

    def test_minimal_config(self):
        config = ConnectionConfig(uri="mongodb://localhost:27017")

        assert config.options is None
        assert config.retry_policy is None

    def test_empty_uri_rejected(self):
        with pytest.raises(ValidationError):
            ConnectionConfig(uri="")

    def test_nested_mappings_parsed(self):
        config = ConnectionConfig.model_validate({
            "uri": "mongodb://db:27017/app",
            "options": {"maxPoolSize": 3},
            "retry_policy": {"max_attempts": 1},
        })

        assert config.options.max_pool_size == 3
        assert config.retry_policy.max_attempts == 1


class TestConnectionAttemptResult:
    """Tests for ConnectionAttemptResult."""

    def test_success(self):
        handle = object()

        result = ConnectionAttemptResult.success(handle, attempts=2)

        assert result.succeeded
        assert result.status == ConnectionStatus.SUCCESS
        assert result.handle is handle
        assert result.error is None
        assert result.attempts == 2

    def test_failure(self):
        error = ConnectionError("down")

        result = ConnectionAttemptResult.failure(error, attempts=3)

        assert not result.succeeded
        assert result.status == ConnectionStatus.FAILURE
        assert result.error is error
        assert result.handle is None

    def test_success_without_handle_rejected(self):
        with pytest.raises(ValueError):
            ConnectionAttemptResult(status=ConnectionStatus.SUCCESS)

    def test_failure_with_handle_rejected(self):
        with pytest.raises(ValueError):
            ConnectionAttemptResult(
                status=ConnectionStatus.FAILURE, handle=object(), error=ConnectionError("x")
            )
