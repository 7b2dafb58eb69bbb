"""Unit tests for Settings validators and env-var loading in config.py."""

from __future__ import annotations

import pytest

from earnsight.config import Settings


# ─────────────────────────────────────────────────────────────
# Validator tests
# ─────────────────────────────────────────────────────────────


class TestParseSymbolList:
    """Tests for parse_symbol_list validator."""

    def test_none_returns_empty_list(self) -> None:
        assert Settings.parse_symbol_list(None) == []

    def test_csv_string(self) -> None:
        assert Settings.parse_symbol_list("aapl, msft ,, jpm") == ["AAPL", "MSFT", "JPM"]

    def test_json_array_string(self) -> None:
        assert Settings.parse_symbol_list('["aapl", "brk.b"]') == ["AAPL", "BRK.B"]

    def test_list_passthrough_uppercased(self) -> None:
        assert Settings.parse_symbol_list(["x", "Y"]) == ["X", "Y"]


class TestDerivedSettings:
    def _make_settings(self, **kwargs: object) -> Settings:
        return Settings.model_construct(**kwargs)

    def test_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.mock_mode is True
        assert s.data_provider == "finnhub"
        assert s.gateway_batch_limit == 30
        assert s.quote_chunk_size == 5
        assert s.quote_chunk_delay == 0.5
        assert s.api_retry_attempts == 3
        assert s.market_timezone == "America/New_York"

    def test_is_production(self) -> None:
        assert self._make_settings(env="production").is_production
        assert not self._make_settings(env="staging").is_production

    def test_upstream_api_key_follows_provider(self) -> None:
        s = Settings(  # type: ignore[call-arg]
            _env_file=None,
            data_provider="fmp",
            finnhub_api_key="fh",
            fmp_api_key="fm",
        )
        assert s.upstream_api_key() == "fm"

    def test_upstream_api_key_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("FINNHUB_API_KEY", raising=False)
        s = Settings(_env_file=None, data_provider="finnhub")  # type: ignore[call-arg]
        assert s.upstream_api_key() is None

    def test_chunk_size_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            Settings(_env_file=None, quote_chunk_size=0)  # type: ignore[call-arg]

    def test_unknown_timezone_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown timezone"):
            Settings(_env_file=None, market_timezone="Mars/Olympus")  # type: ignore[call-arg]


# ─────────────────────────────────────────────────────────────
# Comprehensive env-var loading test
# ─────────────────────────────────────────────────────────────

# Every Settings field mapped to (ENV_VAR_NAME, test_value_string, expected_python_value).
# Aliased fields use their alias; all others use UPPER_CASE(field_name).
# List fields use JSON array syntax.
_ENV_FIELD_SPECS: list[tuple[str, str, str, object]] = [
    # (field_name, env_var_name, env_string_value, expected_value)
    # --- Core (aliased) ---
    ("env", "EARNSIGHT_ENV", "staging", "staging"),
    ("debug", "EARNSIGHT_DEBUG", "true", True),
    ("log_level", "EARNSIGHT_LOG_LEVEL", "WARNING", "WARNING"),
    ("mock_mode", "EARNSIGHT_MOCK_MODE", "false", False),
    ("mock_seed", "MOCK_SEED", "11", 11),
    # --- Upstream market data ---
    ("data_provider", "DATA_PROVIDER", "fmp", "fmp"),
    ("finnhub_api_key", "FINNHUB_API_KEY", "fhkey", "fhkey"),  # SecretStr
    ("finnhub_api_url", "FINNHUB_API_URL", "https://fh.test/v1", "https://fh.test/v1"),
    ("fmp_api_key", "FMP_API_KEY", "fmpkey", "fmpkey"),  # SecretStr
    ("fmp_api_url", "FMP_API_URL", "https://fmp.test/v3", "https://fmp.test/v3"),
    ("gateway_batch_limit", "GATEWAY_BATCH_LIMIT", "60", 60),
    ("sp500_csv_url", "SP500_CSV_URL", "https://csv.test/sp", "https://csv.test/sp"),
    # --- Gateway client ---
    ("api_base_url", "API_BASE_URL", "https://gw.test/api", "https://gw.test/api"),
    ("api_key", "API_KEY", "gwkey", "gwkey"),  # SecretStr
    ("api_timeout", "API_TIMEOUT", "12.5", 12.5),
    ("api_retry_attempts", "API_RETRY_ATTEMPTS", "5", 5),
    ("api_retry_delay", "API_RETRY_DELAY", "0.25", 0.25),
    # --- Batch fetching ---
    ("quote_fetch_mode", "QUOTE_FETCH_MODE", "per_symbol", "per_symbol"),
    ("quote_chunk_size", "QUOTE_CHUNK_SIZE", "10", 10),
    ("quote_chunk_delay", "QUOTE_CHUNK_DELAY", "1.5", 1.5),
    ("history_days", "HISTORY_DAYS", "90", 90),
    ("market_timezone", "MARKET_TIMEZONE", "America/Chicago", "America/Chicago"),
    ("sp500_fallback_symbols", "SP500_FALLBACK_SYMBOLS", '["aapl","msft"]', ["AAPL", "MSFT"]),
    # --- Report analysis ---
    ("serper_api_key", "SERPER_API_KEY", "serp", "serp"),  # SecretStr
    ("serper_url", "SERPER_URL", "https://serper.test", "https://serper.test"),
    ("report_min_chars", "REPORT_MIN_CHARS", "200", 200),
    # --- LLM ---
    ("llm_provider", "LLM_PROVIDER", "openai", "openai"),
    ("anthropic_api_key", "ANTHROPIC_API_KEY", "sk-ant-xxx", "sk-ant-xxx"),  # SecretStr
    ("openai_api_key", "OPENAI_API_KEY", "sk-xxx", "sk-xxx"),  # SecretStr
    (
        "openai_base_url",
        "OPENAI_BASE_URL",
        "https://api.openai.com/v1",
        "https://api.openai.com/v1",
    ),
    ("llm_model", "LLM_MODEL", "gpt-4o-mini", "gpt-4o-mini"),
]

# Fields that are SecretStr (need .get_secret_value() to compare)
_SECRET_FIELDS = {
    "finnhub_api_key",
    "fmp_api_key",
    "api_key",
    "serper_api_key",
    "anthropic_api_key",
    "openai_api_key",
}


class TestSettingsEnvLoading:
    """Verify every Settings field can be loaded from its env var."""

    def test_all_fields_loadable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for _field, env_var, env_val, _expected in _ENV_FIELD_SPECS:
            monkeypatch.setenv(env_var, env_val)

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        for field_name, env_var, _env_val, expected in _ENV_FIELD_SPECS:
            actual = getattr(settings, field_name)
            if field_name in _SECRET_FIELDS:
                actual = actual.get_secret_value()
            assert actual == expected, (
                f"Field {field_name!r} (env={env_var}): expected {expected!r}, got {actual!r}"
            )

    def test_field_spec_covers_all_settings_fields(self) -> None:
        """Ensure _ENV_FIELD_SPECS covers every field in Settings."""
        model_fields = set(Settings.model_fields.keys())
        spec_fields = {field_name for field_name, *_ in _ENV_FIELD_SPECS}
        missing = model_fields - spec_fields
        assert not missing, (
            f"Fields missing from _ENV_FIELD_SPECS: {missing}. "
            "Add them to keep the env-loading test comprehensive."
        )
