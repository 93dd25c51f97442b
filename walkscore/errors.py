"""
Error types raised by the aggregation engine and its providers.

Every error is scoped to a single request; none of them is fatal to the
process.
"""

from typing import Optional


class WalkScoreError(Exception):
    """Base class for all walkscore errors."""
    pass


class ConfigError(WalkScoreError):
    """Raised when configuration is missing or malformed."""
    pass


class InvalidOriginError(WalkScoreError):
    """Raised when an origin address cannot be resolved to coordinates."""

    def __init__(self, origin: str, reason: Optional[str] = None):
        self.origin = origin
        self.reason = reason
        message = f"Origin could not be resolved: {origin!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ProviderError(WalkScoreError):
    """
    Wraps a transport, quota, authentication or malformed-response failure
    from a candidate or distance provider.

    Context (origin, category, batch index, provider status) is kept on the
    instance and rendered into the message so a failure can be diagnosed
    without replaying the request.
    """

    def __init__(
        self,
        message: str,
        origin: Optional[str] = None,
        category: Optional[str] = None,
        batch_index: Optional[int] = None,
        status: Optional[str] = None,
    ):
        self.message = message
        self.origin = origin
        self.category = category
        self.batch_index = batch_index
        self.status = status
        super().__init__(self._render())

    def _render(self) -> str:
        context = []
        if self.origin is not None:
            context.append(f"origin={self.origin!r}")
        if self.category is not None:
            context.append(f"category={self.category}")
        if self.batch_index is not None:
            context.append(f"batch={self.batch_index}")
        if self.status is not None:
            context.append(f"status={self.status}")
        if not context:
            return self.message
        return f"{self.message} [{', '.join(context)}]"


class CircuitOpenError(ProviderError):
    """Raised when a provider call is blocked by an open circuit breaker."""
    pass


class DistanceParseError(WalkScoreError):
    """Raised when a distance string has no parseable numeric value."""
    pass
