"""Unit tests for BridgeConfig."""

import os
from unittest.mock import patch

import pytest
import pytest_check as check
from pydantic import ValidationError

from notra.bridge.config import BridgeConfig, build_system_prompt, get_bridge_config
from notra.models.schemas import ProviderKind


class TestBridgeConfig:
    """Tests for BridgeConfig validation."""

    def test_valid_config_with_all_fields(self) -> None:
        """Config accepts explicit values for every field."""
        config = BridgeConfig(
            openai_api_key="sk-test",
            gemini_api_key="gm-test",
            openai_fast_model="gpt-4o-mini",
            openai_strong_model="gpt-4o",
            gemini_model="gemini-3-pro-preview",
            default_provider="gemini",
            temperature=0.5,
            request_timeout=30,
        )

        check.equal(config.openai_api_key, "sk-test")
        check.equal(config.gemini_api_key, "gm-test")
        check.equal(config.default_provider, ProviderKind.GEMINI)
        check.equal(config.temperature, 0.5)
        check.equal(config.request_timeout, 30.0)

    def test_api_keys_are_stripped(self) -> None:
        config = BridgeConfig(openai_api_key="  sk-test  ", gemini_api_key="\tgm\n")

        check.equal(config.openai_api_key, "sk-test")
        check.equal(config.gemini_api_key, "gm")

    def test_blank_api_keys_become_none(self) -> None:
        """Blank keys are treated as missing rather than rejected."""
        config = BridgeConfig(openai_api_key="   ", gemini_api_key="")

        check.is_none(config.openai_api_key)
        check.is_none(config.gemini_api_key)

    def test_credential_for_maps_kinds_to_keys(self) -> None:
        config = BridgeConfig(openai_api_key="sk-test", gemini_api_key=None)

        check.equal(config.credential_for(ProviderKind.OPENAI_FAST), "sk-test")
        check.equal(config.credential_for(ProviderKind.OPENAI_STRONG), "sk-test")
        check.is_none(config.credential_for(ProviderKind.GEMINI))

    def test_rejects_unknown_default_provider(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            BridgeConfig(default_provider="claude")

        assert "default_provider" in str(exc_info.value)

    def test_rejects_temperature_out_of_range(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            BridgeConfig(temperature=2.5)

        assert "temperature" in str(exc_info.value).lower()

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            BridgeConfig(request_timeout=0)

        assert "request_timeout" in str(exc_info.value)


class TestPersona:
    """Tests for the system instruction."""

    def test_default_persona_names_assistant_and_hides_vendor(self) -> None:
        config = BridgeConfig(assistant_name="Notra", system_prompt=None, use_system_prompt=True)

        check.equal(config.persona, build_system_prompt("Notra"))
        check.is_in("You are Notra", config.persona)
        check.is_in("Never mention which model or company powers you", config.persona)

    def test_custom_system_prompt_wins(self) -> None:
        config = BridgeConfig(system_prompt="Be brief.", use_system_prompt=True)

        assert config.persona == "Be brief."

    def test_persona_can_be_disabled(self) -> None:
        config = BridgeConfig(system_prompt="Be brief.", use_system_prompt=False)

        assert config.persona is None


class TestGetBridgeConfig:
    """Tests for get_bridge_config factory function."""

    def test_loads_values_from_environment(self) -> None:
        env = {
            "OPENAI_API_KEY": "sk-env",
            "GEMINI_API_KEY": "gm-env",
            "OPENAI_FAST_MODEL": "gpt-test-mini",
            "DEFAULT_PROVIDER": "openai-strong",
            "USE_SYSTEM_PROMPT": "false",
            "REQUEST_TIMEOUT": "15",
        }
        with patch.dict("os.environ", env):
            config = get_bridge_config()

        check.equal(config.openai_api_key, "sk-env")
        check.equal(config.gemini_api_key, "gm-env")
        check.equal(config.openai_fast_model, "gpt-test-mini")
        check.equal(config.default_provider, ProviderKind.OPENAI_STRONG)
        check.is_false(config.use_system_prompt)
        check.equal(config.request_timeout, 15.0)

    def test_google_api_key_is_gemini_fallback(self) -> None:
        with patch.dict("os.environ", {"GOOGLE_API_KEY": "google-env"}):
            os.environ.pop("GEMINI_API_KEY", None)
            config = get_bridge_config()

        assert config.gemini_api_key == "google-env"

    def test_empty_gemini_key_falls_back_to_google_key(self) -> None:
        """A blank GEMINI_API_KEY in .env does not hide GOOGLE_API_KEY."""
        with patch.dict("os.environ", {"GEMINI_API_KEY": "", "GOOGLE_API_KEY": "google-env"}):
            config = get_bridge_config()

        assert config.gemini_api_key == "google-env"

    def test_missing_keys_do_not_fail_construction(self) -> None:
        """Credentials are checked per provider, not at startup."""
        with patch.dict("os.environ", {"OPENAI_API_KEY": "", "GEMINI_API_KEY": "", "GOOGLE_API_KEY": ""}):
            config = get_bridge_config()

        check.is_none(config.openai_api_key)
        check.is_none(config.gemini_api_key)
