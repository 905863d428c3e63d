"""Static content catalog: tactics, wildcards, talent and big bets."""

from cmosim.content.tactics import ALL_TACTICS, get_tactic_by_id, get_tactics_by_category
from cmosim.content.talent import (
    BIG_BETS,
    TALENT_POOL,
    get_big_bet_by_id,
    get_random_big_bets,
    get_random_talent_pool,
    get_talent_by_id,
)
from cmosim.content.wildcards import (
    BASELINE_WILDCARDS,
    ENHANCED_WILDCARDS,
    get_enhanced_wildcard_for_quarter,
    get_random_wildcard,
    get_wildcard_by_id,
)

__all__ = [
    "ALL_TACTICS",
    "BASELINE_WILDCARDS",
    "BIG_BETS",
    "ENHANCED_WILDCARDS",
    "TALENT_POOL",
    "get_big_bet_by_id",
    "get_enhanced_wildcard_for_quarter",
    "get_random_big_bets",
    "get_random_talent_pool",
    "get_random_wildcard",
    "get_tactic_by_id",
    "get_tactics_by_category",
    "get_talent_by_id",
    "get_wildcard_by_id",
]
