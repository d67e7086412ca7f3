"""Router configuration.

Values come from code or from BASELINE_* environment variables:

- BASELINE_MAX_HOPS: maximum swaps per route (default 2)
- BASELINE_BASE_TOKENS: comma-separated intermediate token addresses
- BASELINE_PATH_BUDGET: candidate paths evaluated per request (default 256)
- BASELINE_QUOTE_TIMEOUT: seconds allowed per adapter call (default 2)

Adapters (quoter, vault reader) can only be supplied in code.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

from baseline_solver.adapters import ConcentratedQuoter, Erc4626Reader
from baseline_solver.models.types import is_valid_address, normalize_address

DEFAULT_MAX_HOPS = 2
DEFAULT_PATH_BUDGET = 256
DEFAULT_QUOTE_TIMEOUT = 2.0


@dataclass(frozen=True)
class RouterConfig:
    """Configuration for the baseline router.

    Attributes:
        max_hops: Maximum number of swaps per route (>= 1)
        base_tokens: Tokens allowed as intermediate hops. Empty means
            direct pairs only.
        path_budget: Maximum candidate paths evaluated per request
        concentrated_quoter: Quoter for concentrated pools; None skips them
        erc4626_reader: Vault reader for ERC-4626 edges; None skips them
        quote_timeout: Seconds allowed for each adapter call
    """

    max_hops: int = DEFAULT_MAX_HOPS
    base_tokens: tuple[str, ...] = ()
    path_budget: int = DEFAULT_PATH_BUDGET
    concentrated_quoter: ConcentratedQuoter | None = None
    erc4626_reader: Erc4626Reader | None = None
    quote_timeout: float = DEFAULT_QUOTE_TIMEOUT

    def __post_init__(self) -> None:
        """Validate and normalize fields."""
        if self.max_hops < 1:
            raise ValueError(f"max_hops must be at least 1, got {self.max_hops}")
        if self.path_budget < 1:
            raise ValueError(f"path_budget must be at least 1, got {self.path_budget}")
        if self.quote_timeout <= 0:
            raise ValueError(f"quote_timeout must be positive, got {self.quote_timeout}")
        for token in self.base_tokens:
            if not is_valid_address(normalize_address(token)):
                raise ValueError(f"Invalid base token address: {token}")
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(
            self,
            "base_tokens",
            tuple(dict.fromkeys(normalize_address(t) for t in self.base_tokens)),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> RouterConfig:
        """Build a config from BASELINE_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Field values taking precedence over the environment,
                e.g. adapters

        Raises:
            ValueError: If a variable does not parse or fails validation
        """
        env = os.environ if environ is None else environ
        values: dict = {}
        if "BASELINE_MAX_HOPS" in env:
            values["max_hops"] = int(env["BASELINE_MAX_HOPS"])
        if "BASELINE_PATH_BUDGET" in env:
            values["path_budget"] = int(env["BASELINE_PATH_BUDGET"])
        if "BASELINE_QUOTE_TIMEOUT" in env:
            values["quote_timeout"] = float(env["BASELINE_QUOTE_TIMEOUT"])
        if env.get("BASELINE_BASE_TOKENS", "").strip():
            values["base_tokens"] = tuple(
                t.strip() for t in env["BASELINE_BASE_TOKENS"].split(",") if t.strip()
            )
        values.update(overrides)
        return cls(**values)

    def with_adapters(
        self,
        concentrated_quoter: ConcentratedQuoter | None = None,
        erc4626_reader: Erc4626Reader | None = None,
    ) -> RouterConfig:
        """Copy of this config with the given adapters attached."""
        return replace(
            self,
            concentrated_quoter=concentrated_quoter,
            erc4626_reader=erc4626_reader,
        )


DEFAULT_ROUTER_CONFIG = RouterConfig()

__all__ = [
    "RouterConfig",
    "DEFAULT_ROUTER_CONFIG",
    "DEFAULT_MAX_HOPS",
    "DEFAULT_PATH_BUDGET",
    "DEFAULT_QUOTE_TIMEOUT",
]
