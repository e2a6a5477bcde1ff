"""
Purpose: Central configuration for place resolution (geocoding) behaviour.
What it does:

Stores all tunable values for the Place Resolver:

SERIAL_DELAY_S = 0.45

COUNTRY_QUALIFIER = "中国"

RESULT_LIMIT = 3

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GeocodePolicy:
    """
    Central configuration for place resolution.
    """

    # --- Rate limiting ---
    # Pause after each batch item that reached the network.
    # The public Nominatim instance allows about one request per second per client.
    serial_delay_s: float = 0.45

    # --- Query variants ---
    # Appended as the last, least specific variant.
    country_qualifier: str = "中国"

    # --- Service parameters ---
    country_codes: str = "cn"
    accept_language: str = "zh-CN"
    result_limit: int = 3
    timeout_s: float = 10.0

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.serial_delay_s < 0:
            raise ValueError("serial_delay_s must be >= 0")

        if self.result_limit < 1:
            raise ValueError("result_limit must be >= 1")

        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")


def default_geocode_policy() -> GeocodePolicy:
    """
    Convenience factory for the default policy.
    """
    p = GeocodePolicy()
    p.validate()
    return p
