"""Tests for the split calculator."""

import random
from decimal import Decimal

import pytest

from tab_split.amounts import parse_amount
from tab_split.calculator import (
    apply_custom_split,
    custom_total,
    fair_share,
    net_contribution,
    split_custom,
    split_equally,
    split_shared_tax,
    tax_per_person,
    total_with_tax_and_tip,
)
from tab_split.models import Friend


def make_friends(*names: str, you: bool = True) -> list[Friend]:
    """Create friends, the first one being you."""
    friends = [Friend(name=name) for name in names]
    if you:
        friends.insert(0, Friend(name="You", is_you=True))
    return friends


class TestParseAmount:
    """Amount parsing never raises and never goes negative."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("12.50", Decimal("12.50")),
            ("  7 ", Decimal("7")),
            (3, Decimal("3")),
            (0.1, Decimal("0.1")),
            (Decimal("4.25"), Decimal("4.25")),
        ],
    )
    def test_valid_input(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize(
        "raw", ["", "abc", "12..5", None, "-5", -3.2, "NaN", "Infinity", True]
    )
    def test_invalid_or_negative_input_is_zero(self, raw):
        assert parse_amount(raw) == Decimal("0")

    @pytest.mark.parametrize("raw", ["9e999999", "1e13", Decimal("1000000000000.01")])
    def test_absurdly_large_input_is_zero(self, raw):
        assert parse_amount(raw) == Decimal("0")

    def test_ceiling_is_inclusive(self):
        assert parse_amount("1000000000000") == Decimal("1000000000000")

    def test_no_ceiling(self):
        assert parse_amount("5e15", limit=None) == Decimal("5e15")
        assert parse_amount("-5e15", limit=None) == 0


class TestTotalWithTaxAndTip:
    """Bill + tax + tip percentage of the bill."""

    def test_bill_tax_and_tip(self):
        # 100 + 8.50 + 18% of 100
        assert total_with_tax_and_tip("100", "8.50", "18") == Decimal("126.50")

    def test_tip_is_on_pretax_bill(self):
        assert total_with_tax_and_tip("50", "10", "10") == Decimal("65")

    def test_optional_parts_default_to_zero(self):
        assert total_with_tax_and_tip("42") == Decimal("42")

    def test_garbage_input_counts_as_zero(self):
        assert total_with_tax_and_tip("abc", "2", "15") == Decimal("2")

    def test_huge_input_does_not_overflow(self):
        assert total_with_tax_and_tip("9e999999", "9e999999", "0") == 0
        assert total_with_tax_and_tip("100", "9e999999", "9e999999") == Decimal("100")

    def test_largest_inputs_stay_finite(self):
        top = "1000000000000"
        total = total_with_tax_and_tip(top, top, top)
        assert total.is_finite()
        assert total == Decimal("1e22") + Decimal("2e12")


class TestSplitEqually:
    """Equal split credits the payer and divides the rest evenly."""

    def test_three_friends_ninety_dollars(self):
        friends = make_friends("Sam", "Lee")
        you = friends[0]

        result = split_equally(friends, Decimal("90.00"), payer_id=you.id)

        owes = {f.display_name: f.owes_amount for f in result}
        assert owes == {
            "You": Decimal("0"),
            "Sam": Decimal("30.00"),
            "Lee": Decimal("30.00"),
        }

    def test_sum_is_total_minus_payer_share(self):
        friends = make_friends("Sam", "Lee", "Kim", "Ari", "Jo")
        total = Decimal("100")
        payer = friends[2]

        result = split_equally(friends, total, payer_id=payer.id)

        share = total / len(friends)
        assert sum(f.owes_amount for f in result) == (len(friends) - 1) * share
        assert next(f for f in result if f.id == payer.id).owes_amount == 0

    def test_no_payer_everyone_owes(self):
        friends = make_friends("Sam")
        result = split_equally(friends, Decimal("40"))
        assert [f.owes_amount for f in result] == [Decimal("20"), Decimal("20")]

    def test_uneven_total_is_not_rounded(self):
        friends = make_friends("Sam", "Lee")
        result = split_equally(friends, Decimal("100"))
        assert result[1].owes_amount == Decimal("100") / 3

    @pytest.mark.parametrize("total", [Decimal("0"), Decimal("-10")])
    def test_non_positive_total_is_noop(self, total):
        friends = [
            Friend(name="You", is_you=True, owes_amount=Decimal("5")),
            Friend(name="Sam", owes_amount=Decimal("7")),
        ]

        result = split_equally(friends, total, payer_id=friends[0].id)

        assert [f.owes_amount for f in result] == [Decimal("5"), Decimal("7")]

    def test_empty_friend_list_is_noop(self):
        assert split_equally([], Decimal("50")) == []

    def test_input_is_not_mutated(self):
        friends = make_friends("Sam")
        split_equally(friends, Decimal("10"), payer_id=friends[0].id)
        assert all(f.owes_amount == 0 for f in friends)

    def test_ids_are_preserved(self):
        friends = make_friends("Sam", "Lee")
        result = split_equally(friends, Decimal("30"))
        assert [f.id for f in result] == [f.id for f in friends]


class TestSplitCustom:
    """Paid+tip model: owe the shortfall against the fair share."""

    def test_shortfall_is_owed(self):
        friends = [
            Friend(name="You", is_you=True, paid_amount=Decimal("60")),
            Friend(name="Sam", paid_amount=Decimal("20"), custom_tip=Decimal("5")),
            Friend(name="Lee"),
        ]

        result = split_custom(friends, Decimal("90"))

        assert [f.owes_amount for f in result] == [
            Decimal("0"),
            Decimal("5"),
            Decimal("30"),
        ]

    def test_overpayment_is_not_owed_but_visible_as_net(self):
        you = Friend(name="You", is_you=True, paid_amount=Decimal("50"))
        sam = Friend(name="Sam", paid_amount=Decimal("10"))

        result = split_custom([you, sam], Decimal("60"))

        assert result[0].owes_amount == 0
        assert net_contribution(result[0], fair_share(result, Decimal("60"))) == 20

    def test_matches_formula_for_every_friend(self):
        rng = random.Random(7)
        friends = [
            Friend(
                name=f"F{i}",
                paid_amount=Decimal(rng.randint(0, 5000)) / 100,
                custom_tip=Decimal(rng.randint(0, 800)) / 100,
            )
            for i in range(6)
        ]
        total = Decimal("123.45")
        share = total / len(friends)

        for friend in split_custom(friends, total):
            expected = max(share - friend.paid_amount - friend.custom_tip, Decimal(0))
            assert friend.owes_amount == expected

    def test_order_independent(self):
        friends = [
            Friend(name="A", paid_amount=Decimal("40")),
            Friend(name="B", paid_amount=Decimal("5"), custom_tip=Decimal("2")),
            Friend(name="C"),
        ]
        forward = {f.id: f.owes_amount for f in split_custom(friends, Decimal("75"))}
        backward = {
            f.id: f.owes_amount for f in split_custom(friends[::-1], Decimal("75"))
        }
        assert forward == backward

    def test_recompute_is_idempotent(self):
        friends = [Friend(name="A", paid_amount=Decimal("10")), Friend(name="B")]
        once = split_custom(friends, Decimal("30"))
        twice = split_custom(once, Decimal("30"))
        assert once == twice

    def test_recompute_after_edit(self):
        friends = [Friend(name="A"), Friend(name="B")]
        before = split_custom(friends, Decimal("30"))
        assert before[0].owes_amount == 15

        edited = [before[0].model_copy(update={"paid_amount": Decimal("12")}), before[1]]
        after = split_custom(edited, Decimal("30"))
        assert after[0].owes_amount == 3

    def test_no_friends(self):
        assert fair_share([], Decimal("30")) == 0
        assert split_custom([], Decimal("30")) == []

    def test_negative_paid_read_as_zero(self):
        # model_copy skips validation, so a negative can slip through
        a = Friend(name="A").model_copy(update={"paid_amount": Decimal("-10")})
        b = Friend(name="B", paid_amount=Decimal("10"))

        result = split_custom([a, b], 20)

        assert [f.owes_amount for f in result] == [Decimal("10"), Decimal("0")]
        assert net_contribution(a, Decimal("10")) == Decimal("-10")

    def test_negative_tip_read_as_zero(self):
        a = Friend(name="A", paid_amount=Decimal("10"))
        a = a.model_copy(update={"custom_tip": Decimal("-4")})
        assert split_custom([a], Decimal("10"))[0].owes_amount == 0


class TestSplitSharedTax:
    """Shared-tax model: owes_amount is the friend's full subtotal."""

    def test_subtotals(self):
        friends = [
            Friend(name="You", is_you=True, paid_amount=Decimal("20")),
            Friend(name="Sam", paid_amount=Decimal("15"), custom_tip=Decimal("3")),
        ]

        result = split_shared_tax(friends, "4")

        assert [f.owes_amount for f in result] == [Decimal("22"), Decimal("20")]
        assert custom_total(friends, "4") == Decimal("42")

    def test_tax_per_person(self):
        assert tax_per_person(make_friends("Sam", "Lee"), "9") == Decimal("3")
        assert tax_per_person([], "9") == 0

    def test_bad_tax_input_is_zero(self):
        friends = [Friend(name="A", paid_amount=Decimal("10"))]
        assert split_shared_tax(friends, "n/a")[0].owes_amount == Decimal("10")

    def test_negative_amounts_read_as_zero(self):
        a = Friend(name="A").model_copy(
            update={"paid_amount": Decimal("-10"), "custom_tip": Decimal("-1")}
        )
        b = Friend(name="B", paid_amount=Decimal("8"))

        assert [f.owes_amount for f in split_shared_tax([a, b], "2")] == [
            Decimal("1"),
            Decimal("9"),
        ]
        assert custom_total([a, b], "2") == Decimal("10")


class TestApplyCustomSplit:
    """Policy dispatch."""

    def test_net_owed_policy(self):
        friends = [Friend(name="A", paid_amount=Decimal("30")), Friend(name="B")]
        result = apply_custom_split(friends, Decimal("30"), "5", policy="net_owed")
        assert [f.owes_amount for f in result] == [Decimal("0"), Decimal("15")]

    def test_subtotal_policy(self):
        friends = [Friend(name="A", paid_amount=Decimal("30")), Friend(name="B")]
        result = apply_custom_split(friends, Decimal("30"), "5", policy="subtotal")
        assert [f.owes_amount for f in result] == [Decimal("32.5"), Decimal("2.5")]

    def test_unknown_policy(self):
        with pytest.raises(ValueError, match="Unknown custom split policy"):
            apply_custom_split([], Decimal("1"), policy="bogus")
