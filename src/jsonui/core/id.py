"""ID Generation System.

ULID-based identifiers for engine runtime objects.

- K-sortable: invocation ids order by start time in logs
- Prefixed: `inv_`, `sub_`, `obs_`, `req_` make log lines readable
"""

from datetime import datetime, timezone
from typing import NewType

from ulid import ULID

# ============================================================================
# Type-Safe ID Wrappers
# ============================================================================

InvocationID = NewType("InvocationID", str)
"""One run of an action through the resolve/execute state machine"""

SubscriptionID = NewType("SubscriptionID", str)
"""Live binding subscription"""

ObserverID = NewType("ObserverID", str)
"""State store observer registration"""

RequestID = NewType("RequestID", str)
"""HTTP request started by a request action without an explicit id"""


class Prefix:
    """ID prefix constants."""

    INVOCATION = "inv"
    SUBSCRIPTION = "sub"
    OBSERVER = "obs"
    REQUEST = "req"


# ============================================================================
# ULID Generator
# ============================================================================


class Generator:
    """ULID generator."""

    def generate(self) -> str:
        """Generate a new ULID."""
        return str(ULID())

    def generate_with_prefix(self, prefix: str) -> str:
        """Generate ULID with type prefix."""
        return f"{prefix}_{self.generate()}"

    def timestamp(self, id_str: str) -> int:
        """Extract timestamp (milliseconds) from a (possibly prefixed) ULID."""
        try:
            ulid_str = id_str.rsplit("_", 1)[-1]
            return int(ULID.from_str(ulid_str).timestamp * 1000)
        except ValueError:
            return 0


_generator = Generator()


def new_invocation_id() -> InvocationID:
    """Generate new invocation ID."""
    return InvocationID(_generator.generate_with_prefix(Prefix.INVOCATION))


def new_subscription_id() -> SubscriptionID:
    """Generate new subscription ID."""
    return SubscriptionID(_generator.generate_with_prefix(Prefix.SUBSCRIPTION))


def new_observer_id() -> ObserverID:
    """Generate new observer ID."""
    return ObserverID(_generator.generate_with_prefix(Prefix.OBSERVER))


def new_request_id() -> RequestID:
    """Generate new request ID."""
    return RequestID(_generator.generate_with_prefix(Prefix.REQUEST))


def is_valid(id_str: str) -> bool:
    """Check if string is a valid (possibly prefixed) ULID."""
    ulid_part = id_str.rsplit("_", 1)[-1]
    if len(ulid_part) != 26:
        return False
    try:
        ULID.from_str(ulid_part)
        return True
    except ValueError:
        return False


def extract_timestamp(id_str: str) -> datetime | None:
    """Extract creation time from an ID, or None if it is not a ULID."""
    timestamp_ms = _generator.timestamp(id_str)
    if timestamp_ms <= 0:
        return None
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)


def extract_prefix(id_str: str) -> str | None:
    """Extract prefix from prefixed ID."""
    parts = id_str.split("_")
    return parts[0] if len(parts) == 2 else None
