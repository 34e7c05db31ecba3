"""
Reward eligibility — may a tier be redeemed against a subtotal and balance?
"""

from __future__ import annotations

from dataclasses import dataclass

from kungfu import Result, Ok, Error

from nebula_checkout._types import Amount
from nebula_checkout.catalog import RewardTier


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RewardError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class UnknownReward(RewardError):
    reward_id: str = ""


@dataclass(frozen=True, slots=True)
class RewardIneligible(RewardError):
    """
    Reward cannot be applied.

    coin_shortfall / spend_shortfall are 0 for the condition that holds.
    """

    reward_id: str = ""
    coin_shortfall: int = 0
    spend_shortfall: Amount | int = 0


# ═══════════════════════════════════════════════════════════════════════════════
# Checks
# ═══════════════════════════════════════════════════════════════════════════════


def is_eligible(reward: RewardTier, subtotal: Amount, coins_balance: int) -> bool:
    return subtotal >= reward.min_spend and coins_balance >= reward.coins


def check_reward(
    reward: RewardTier,
    subtotal: Amount,
    coins_balance: int,
) -> Result[RewardTier, RewardIneligible]:
    """
    Check reward against subtotal and balance.

    The coin shortfall is reported first when both conditions fail.
    """
    if is_eligible(reward, subtotal, coins_balance):
        return Ok(reward)

    coin_shortfall = max(0, reward.coins - coins_balance)
    spend_shortfall = max(0, reward.min_spend - subtotal)

    if coin_shortfall:
        message = f"You need {coin_shortfall} more coins for {reward.label}"
    else:
        message = (
            f"Minimum order value of {reward.min_spend} for {reward.label} "
            f"not reached ({spend_shortfall} short)"
        )

    return Error(RewardIneligible(
        message=message,
        reward_id=reward.id,
        coin_shortfall=coin_shortfall,
        spend_shortfall=spend_shortfall,
    ))


__all__ = (
    "RewardError",
    "UnknownReward",
    "RewardIneligible",
    "is_eligible",
    "check_reward",
)
