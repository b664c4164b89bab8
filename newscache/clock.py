"""Wall-clock helpers."""

import pendulum


def now_millis() -> int:
    """Current UTC time in epoch milliseconds."""
    return int(pendulum.now("UTC").timestamp() * 1000)
