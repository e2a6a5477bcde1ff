"""
Purpose: Central configuration for route requests (single source of truth).
What it does:

Stores all tunable throttling/timeout values for the driving-route queue:

MAX_IN_FLIGHT = 2

REQUEST_DELAY_S = 0.2

REQUEST_TIMEOUT_S = 10

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RoutingPolicy:
    """
    Central configuration for the Route Request Queue.

    Notes:
    - max_in_flight bounds concurrent calls to the driving service;
      anything above waits FIFO.
    - request_delay_s is slept by every dequeued request right before it
      is issued, to smooth bursts against the third-party rate limit.
    """

    # --- Throttling ---
    max_in_flight: int = 2
    request_delay_s: float = 0.2

    # --- HTTP ---
    # How long to wait for the driving service before giving up.
    timeout_s: float = 10.0

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.max_in_flight < 1:
            raise ValueError("max_in_flight must be >= 1")

        if self.request_delay_s < 0:
            raise ValueError("request_delay_s must be >= 0")

        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")


def default_routing_policy() -> RoutingPolicy:
    """
    Convenience factory for the default policy.
    """
    p = RoutingPolicy()
    p.validate()
    return p
