"""Split calculation: equal and custom splits of an outing's bill.

Every function here is pure. Friend lists are copied, never mutated, so the
same inputs always give the same result and recomputing is safe to repeat.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID

from .amounts import ZERO, parse_amount
from .config import CustomSplitPolicy
from .models import Friend

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def total_with_tax_and_tip(
    bill: str | Decimal | float | None,
    tax: str | Decimal | float | None = None,
    tip_percent: str | Decimal | float | None = None,
) -> Decimal:
    """
    Compute the bill total including tax and a percentage tip.

    The tip is a percentage of the pre-tax bill. Unparseable input counts as 0.

    Args:
        bill: Pre-tax bill amount
        tax: Tax amount (optional)
        tip_percent: Tip as a percentage of the bill, e.g. "18" (optional)

    Returns:
        bill + tax + bill * tip_percent / 100
    """
    amount = parse_amount(bill)
    return amount + parse_amount(tax) + amount * parse_amount(tip_percent) / HUNDRED


def split_equally(
    friends: Sequence[Friend],
    total: Decimal,
    payer_id: UUID | None = None,
) -> list[Friend]:
    """
    Split a total evenly, crediting the friend who paid.

    Each friend owes total / len(friends); the payer owes nothing. No
    rounding or remainder redistribution is applied. A non-positive total or
    an empty friend list leaves every owes_amount unchanged.

    Args:
        friends: Participants in the outing
        total: Bill total, tax and tip included
        payer_id: Friend who paid the whole bill (optional)

    Returns:
        New list of friends with owes_amount set
    """
    if total <= 0 or not friends:
        logger.debug(f"Equal split skipped (total={total}, friends={len(friends)})")
        return [friend.model_copy() for friend in friends]

    share = total / len(friends)
    return [
        friend.model_copy(
            update={"owes_amount": ZERO if friend.id == payer_id else share}
        )
        for friend in friends
    ]


def fair_share(friends: Sequence[Friend], total_bill: Decimal) -> Decimal:
    """Each friend's even share of the bill (0 with no friends)."""
    if not friends:
        return ZERO
    return parse_amount(total_bill, limit=None) / len(friends)


def contributed(friend: Friend) -> Decimal:
    """What a friend paid plus their tip, negatives and garbage read as 0."""
    return parse_amount(friend.paid_amount) + parse_amount(friend.custom_tip)


def net_contribution(friend: Friend, share: Decimal) -> Decimal:
    """What a friend put in minus their share; positive means overpaid."""
    return contributed(friend) - share


def split_custom(friends: Sequence[Friend], total_bill: Decimal) -> list[Friend]:
    """
    Recompute owed amounts from what each friend paid and tipped.

    A friend who contributed less than the fair share owes the shortfall;
    a friend who contributed more owes nothing (the surplus is only visible
    through net_contribution). Call again after any paid/tip edit.

    Args:
        friends: Participants with paid_amount and custom_tip filled in
        total_bill: Bill total, tax and tip included

    Returns:
        New list of friends with owes_amount set
    """
    share = fair_share(friends, total_bill)
    return [
        friend.model_copy(
            update={"owes_amount": max(-net_contribution(friend, share), ZERO)}
        )
        for friend in friends
    ]


def tax_per_person(friends: Sequence[Friend], shared_tax) -> Decimal:
    """Each friend's equal part of a shared tax amount (0 with no friends)."""
    if not friends:
        return ZERO
    return parse_amount(shared_tax) / len(friends)


def split_shared_tax(friends: Sequence[Friend], shared_tax) -> list[Friend]:
    """
    Make each friend responsible for their own amount, tip and tax share.

    Here owes_amount is the friend's full subtotal, not a debt to the payer.

    Args:
        friends: Participants with paid_amount and custom_tip filled in
        shared_tax: Tax for the whole bill, split equally

    Returns:
        New list of friends with owes_amount set to their subtotal
    """
    tax_share = tax_per_person(friends, shared_tax)
    return [
        friend.model_copy(
            update={
                "owes_amount": contributed(friend) + tax_share
            }
        )
        for friend in friends
    ]


def custom_total(friends: Sequence[Friend], shared_tax=None) -> Decimal:
    """Grand total of every friend's subtotal under the shared-tax model."""
    tax_share = tax_per_person(friends, shared_tax)
    return sum(
        (contributed(f) + tax_share for f in friends),
        ZERO,
    )


def apply_custom_split(
    friends: Sequence[Friend],
    total_bill: Decimal,
    shared_tax=None,
    policy: CustomSplitPolicy = "net_owed",
) -> list[Friend]:
    """
    Run the custom split under the configured policy.

    Args:
        friends: Participants with paid_amount and custom_tip filled in
        total_bill: Bill total (used by "net_owed")
        shared_tax: Shared tax (used by "subtotal")
        policy: "net_owed" or "subtotal"

    Returns:
        New list of friends with owes_amount set
    """
    if policy == "net_owed":
        return split_custom(friends, total_bill)
    if policy == "subtotal":
        return split_shared_tax(friends, shared_tax)
    raise ValueError(f"Unknown custom split policy: {policy}")
