"""
Rewards — coin-for-discount eligibility.

    from nebula_checkout import rewards as R

    match R.check_reward(tier, subtotal, balance):
        case Ok(tier):
            ...
        case Error(e):
            print(e.message)  # "You need 300 more coins for 10 EUR off"
"""

from nebula_checkout.rewards._eligibility import (
    RewardError,
    UnknownReward,
    RewardIneligible,
    is_eligible,
    check_reward,
)

__all__ = (
    "RewardError",
    "UnknownReward",
    "RewardIneligible",
    "is_eligible",
    "check_reward",
)
