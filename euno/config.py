"""Provider connection configuration.

The connection parameters are a frozen dataclass with:
- Defaults for the timeout and the concurrency ceiling
- Immutability (frozen=True, supplied once at registry configuration time)
- Overrides from environment variables via ``from_env``

The API key is never part of ``repr()``.
"""

import os
from dataclasses import dataclass, field

from euno.errors import InputValidationError

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_CONCURRENCY = 3


@dataclass(frozen=True)
class ProviderConfig:
    """Connection parameters shared by every lifecycle controller.

    Usage::

        config = ProviderConfig(
            server_url="https://api.app.euno.ai",
            api_key=os.environ["EUNO_API_KEY"],
            account_id=42,
        )
        registry = IntegrationRegistry.configure(config)
    """

    server_url: str
    api_key: str = field(repr=False)
    account_id: int
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY

    def validate(self) -> "ProviderConfig":
        """Raise InputValidationError if any parameter is unusable."""
        if not self.server_url:
            raise InputValidationError("server_url must be set", field="server_url")
        if not self.api_key:
            raise InputValidationError("api_key must be set", field="api_key")
        if isinstance(self.account_id, bool) or not isinstance(self.account_id, int) or self.account_id <= 0:
            raise InputValidationError(
                f"account_id must be a positive integer, got {self.account_id!r}",
                field="account_id",
            )
        if self.timeout <= 0:
            raise InputValidationError("timeout must be positive", field="timeout")
        if self.max_concurrency < 1:
            raise InputValidationError("max_concurrency must be at least 1", field="max_concurrency")
        return self

    @property
    def account_url(self) -> str:
        """Root URL for every account-scoped request."""
        return f"{self.server_url.rstrip('/')}/accounts/{self.account_id}"

    @classmethod
    def from_env(cls, prefix: str = "EUNO_") -> "ProviderConfig":
        """Create config from environment variables.

        Example: EUNO_SERVER_URL, EUNO_API_KEY, EUNO_ACCOUNT_ID, EUNO_TIMEOUT
        """
        raw_account = os.getenv(f"{prefix}ACCOUNT_ID", "")
        try:
            account_id = int(raw_account)
        except ValueError:
            raise InputValidationError(
                f"{prefix}ACCOUNT_ID must be an integer, got {raw_account!r}",
                field="account_id",
            ) from None

        overrides = {}
        timeout = os.getenv(f"{prefix}TIMEOUT")
        if timeout:
            try:
                overrides["timeout"] = float(timeout)
            except ValueError:
                raise InputValidationError(
                    f"{prefix}TIMEOUT must be a number, got {timeout!r}",
                    field="timeout",
                ) from None

        return cls(
            server_url=os.getenv(f"{prefix}SERVER_URL", ""),
            api_key=os.getenv(f"{prefix}API_KEY", ""),
            account_id=account_id,
            **overrides,
        ).validate()
