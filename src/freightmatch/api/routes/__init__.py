"""Route group exports."""

from . import accounts, freights, health, match_requests, trips

__all__ = ["trips", "freights", "match_requests", "accounts", "health"]
