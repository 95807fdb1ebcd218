"""Masking of credentials embedded in URLs before they reach the logs."""

import re
from typing import Any

PLACEHOLDER = "[REDACTED]"

_SECRET_PARAMS = re.compile(
    r"([?&](?:token|api_key|apikey|key|x-amz-signature|x-amz-credential|x-amz-security-token)=)[^&#]+",
    re.IGNORECASE,
)


def redact_url(value: Any) -> str:
    """Replace secret query-parameter values with a placeholder.

    >>> redact_url("https://x/a.mp3?token=abc&v=1")
    'https://x/a.mp3?token=[REDACTED]&v=1'
    """
    return _SECRET_PARAMS.sub(rf"\g<1>{PLACEHOLDER}", str(value or ""))


def redact_any(value: Any) -> Any:
    """Apply ``redact_url`` to every string inside nested dicts and lists."""
    if isinstance(value, str):
        return redact_url(value)
    if isinstance(value, dict):
        return {k: redact_any(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact_any(v) for v in value]
    return value
