"""Tests for RouterConfig validation and environment loading."""

import pytest

from baseline_solver.config import DEFAULT_ROUTER_CONFIG, RouterConfig
from tests.conftest import FakeQuoter, FakeVaultReader
from tests.helpers import TOKEN_A, TOKEN_B, USDC, WETH


class TestRouterConfig:
    """Tests for field validation."""

    def test_defaults(self) -> None:
        assert DEFAULT_ROUTER_CONFIG.max_hops == 2
        assert DEFAULT_ROUTER_CONFIG.path_budget == 256
        assert DEFAULT_ROUTER_CONFIG.base_tokens == ()
        assert DEFAULT_ROUTER_CONFIG.concentrated_quoter is None
        assert DEFAULT_ROUTER_CONFIG.quote_timeout == 2.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_hops": 0},
            {"path_budget": 0},
            {"quote_timeout": 0},
            {"base_tokens": ("0x1234",)},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            RouterConfig(**kwargs)

    def test_base_tokens_normalized_and_deduplicated(self) -> None:
        config = RouterConfig(base_tokens=(WETH.upper().replace("0X", "0x"), USDC, WETH))
        assert config.base_tokens == (WETH, USDC)

    def test_with_adapters(self) -> None:
        quoter = FakeQuoter()
        reader = FakeVaultReader()
        config = RouterConfig(max_hops=3).with_adapters(quoter, reader)
        assert config.max_hops == 3
        assert config.concentrated_quoter is quoter
        assert config.erc4626_reader is reader


class TestFromEnv:
    """Tests for RouterConfig.from_env."""

    def test_empty_environment_gives_defaults(self) -> None:
        assert RouterConfig.from_env({}) == RouterConfig()

    def test_reads_variables(self) -> None:
        env = {
            "BASELINE_MAX_HOPS": "3",
            "BASELINE_PATH_BUDGET": "64",
            "BASELINE_QUOTE_TIMEOUT": "0.5",
            "BASELINE_BASE_TOKENS": f" {TOKEN_A}, {TOKEN_B} ,",
        }
        config = RouterConfig.from_env(env)
        assert config.max_hops == 3
        assert config.path_budget == 64
        assert config.quote_timeout == 0.5
        assert config.base_tokens == (TOKEN_A, TOKEN_B)

    def test_overrides_win(self) -> None:
        quoter = FakeQuoter()
        config = RouterConfig.from_env(
            {"BASELINE_MAX_HOPS": "3"}, max_hops=1, concentrated_quoter=quoter
        )
        assert config.max_hops == 1
        assert config.concentrated_quoter is quoter

    def test_blank_base_tokens_ignored(self) -> None:
        assert RouterConfig.from_env({"BASELINE_BASE_TOKENS": "  "}).base_tokens == ()

    @pytest.mark.parametrize(
        "env",
        [
            {"BASELINE_MAX_HOPS": "two"},
            {"BASELINE_MAX_HOPS": "0"},
            {"BASELINE_QUOTE_TIMEOUT": "-1"},
            {"BASELINE_BASE_TOKENS": "not-an-address"},
        ],
    )
    def test_bad_values(self, env: dict) -> None:
        with pytest.raises(ValueError):
            RouterConfig.from_env(env)

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BASELINE_PATH_BUDGET", "8")
        assert RouterConfig.from_env().path_budget == 8
