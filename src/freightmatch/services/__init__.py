"""Operations exposed to the application layer."""

from .matching import compute_matches
from .requests import cancel_match_proposal, propose_match, respond_to_match

__all__ = ["compute_matches", "propose_match", "respond_to_match", "cancel_match_proposal"]
