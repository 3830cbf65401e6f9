"""
Account provisioner — logical account name -> custody-managed address.

provision() is idempotent: the custody service's get-or-create keyed by name
never creates a second address, so transient failures are safe to retry with
exponential backoff.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass

from backend_wallet.core.exceptions import ConfigurationError, CustodyUnavailable, ValidationError
from backend_wallet.custody.client import CustodyService
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)

# Custody naming rule: 2-36 chars, alphanumerics and hyphens
_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9-]{1,35}$")


@dataclass(frozen=True)
class Account:
    logical_name: str
    address: str


def validate_account_name(name: str | None) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name is required and must be a string")
    text = name.strip()
    if not _NAME_RE.match(text):
        raise ValidationError(
            "Name must be 2-36 characters of letters, digits and hyphens, starting with a letter or digit"
        )
    return text


class AccountProvisioner:
    """Resolve or create the custody account for a logical name, with retry."""

    def __init__(
        self,
        custody: CustodyService,
        *,
        max_retries: int = 3,
        min_retry_delay_sec: float = 0.5,
        max_retry_delay_sec: float = 8.0,
    ) -> None:
        self._custody = custody
        self._max_retries = max(1, max_retries)
        self._min_retry_delay = min_retry_delay_sec
        self._max_retry_delay = max_retry_delay_sec

    async def provision(self, logical_name: str) -> Account:
        name = validate_account_name(logical_name)
        delay = self._min_retry_delay
        last_error: Exception | None = None
        for attempt in range(self._max_retries):
            try:
                address = await self._custody.get_or_create_account(name)
                break
            except ConfigurationError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    "provision_retry",
                    account_name=name,
                    attempt=attempt + 1,
                    max_retries=self._max_retries,
                    error=str(e),
                )
                if attempt + 1 < self._max_retries:
                    await asyncio.sleep(delay)
                    delay = min(delay * 2, self._max_retry_delay)
        else:
            logger.error("provision_give_up", account_name=name, error=str(last_error))
            raise CustodyUnavailable(f"Custody service rejected account request: {last_error}") from last_error

        logger.info("account_ready", account_name=name, address=address)
        return Account(logical_name=name, address=address)
