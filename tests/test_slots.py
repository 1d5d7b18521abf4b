from __future__ import annotations

import unittest

from clubdraw.prize_draw import (
    DISTRICT_CONTEXT,
    PrizeDefinition,
    Scope,
    WinnerLedger,
    WinnerRecord,
    count_prize_winners,
    record_matches_prize,
    remaining_slots,
    scope_context_for,
    with_bonus_slots,
)


PRESIDENT = PrizeDefinition("x-1", "社長獎", 2, "紅包 $1,000", "Andy", "P")


def _record(
    record_id: str,
    participant_id: str,
    *,
    prize_id: str | None = "x-1",
    scope: Scope = Scope.CLUB,
    context: str = "ClubX",
    prize_name: str = "社長獎",
) -> WinnerRecord:
    return WinnerRecord(
        id=record_id,
        participant_id=participant_id,
        scope=scope,
        prize_id=prize_id,
        scope_context=context,
        timestamp=0,
        prize_name=prize_name,
    )


class RemainingSlotsTests(unittest.TestCase):
    def test_untouched_prize_has_all_slots(self) -> None:
        self.assertEqual(remaining_slots(PRESIDENT, WinnerLedger(), Scope.CLUB, "ClubX"), 2)

    def test_records_by_prize_id_consume_slots(self) -> None:
        ledger = WinnerLedger([_record("r1", "a")])
        self.assertEqual(remaining_slots(PRESIDENT, ledger, Scope.CLUB, "ClubX"), 1)
        ledger.append(_record("r2", "b"))
        self.assertEqual(remaining_slots(PRESIDENT, ledger, Scope.CLUB, "ClubX"), 0)

    def test_other_prizes_do_not_count(self) -> None:
        ledger = WinnerLedger(
            [
                _record("r1", "a", prize_id="y-1"),
                _record("r2", "b", prize_id="z-1", scope=Scope.ZONE, context="Zone1"),
            ]
        )
        self.assertEqual(remaining_slots(PRESIDENT, ledger, Scope.CLUB, "ClubX"), 2)

    def test_id_match_ignores_name(self) -> None:
        # Same-named prize in the same club but a different id is a different prize.
        ledger = WinnerLedger([_record("r1", "a", prize_id="x-2")])
        self.assertEqual(count_prize_winners(PRESIDENT, ledger, Scope.CLUB, "ClubX"), 0)

    def test_never_negative(self) -> None:
        ledger = WinnerLedger([_record("r1", "a"), _record("r2", "b")])
        tiny = PrizeDefinition("x-1", "社長獎", 1)
        self.assertEqual(remaining_slots(tiny, ledger, Scope.CLUB, "ClubX"), 0)

    def test_zero_slot_prize_is_exhausted(self) -> None:
        empty = PrizeDefinition("x-0", "社長獎", 0)
        self.assertEqual(remaining_slots(empty, WinnerLedger(), Scope.CLUB, "ClubX"), 0)

    def test_deleting_a_record_returns_the_slot(self) -> None:
        ledger = WinnerLedger([_record("r1", "a"), _record("r2", "b")])
        ledger.delete("r2")
        self.assertEqual(remaining_slots(PRESIDENT, ledger, Scope.CLUB, "ClubX"), 1)


class BonusSlotTests(unittest.TestCase):
    def test_bonus_applies_to_next_read(self) -> None:
        ledger = WinnerLedger([_record("r1", "a"), _record("r2", "b")])
        self.assertEqual(remaining_slots(PRESIDENT, ledger, Scope.CLUB, "ClubX"), 0)
        bigger = with_bonus_slots(PRESIDENT)
        self.assertEqual(bigger.total_slots, 3)
        self.assertEqual(remaining_slots(bigger, ledger, Scope.CLUB, "ClubX"), 1)
        self.assertEqual(with_bonus_slots(PRESIDENT, 3).total_slots, 5)

    def test_bonus_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            with_bonus_slots(PRESIDENT, 0)

    def test_negative_total_slots_rejected(self) -> None:
        with self.assertRaises(ValueError):
            PrizeDefinition("bad", "Bad", -1)


class LegacyNameMatchTests(unittest.TestCase):
    def test_record_without_prize_id_matches_by_name_scope_and_context(self) -> None:
        legacy = _record("r1", "a", prize_id=None)
        self.assertTrue(record_matches_prize(legacy, PRESIDENT, Scope.CLUB, "ClubX"))
        ledger = WinnerLedger([legacy])
        self.assertEqual(remaining_slots(PRESIDENT, ledger, Scope.CLUB, "ClubX"), 1)

    def test_legacy_record_needs_every_field_to_agree(self) -> None:
        cases = {
            "context": _record("r1", "a", prize_id=None, context="ClubY"),
            "scope": _record("r2", "a", prize_id=None, scope=Scope.ZONE),
            "name": _record("r3", "a", prize_id=None, prize_name="總監獎"),
        }
        for label, record in cases.items():
            with self.subTest(mismatch=label):
                self.assertFalse(record_matches_prize(record, PRESIDENT, Scope.CLUB, "ClubX"))

    def test_legacy_district_record_counts_against_district_prize(self) -> None:
        director = PrizeDefinition("dist-dg-1", "總監獎", 2)
        legacy = _record(
            "r1",
            "a",
            prize_id=None,
            scope=Scope.DISTRICT,
            context="全體",
            prize_name="總監獎",
        )
        context = scope_context_for(Scope.DISTRICT, None)
        self.assertEqual(context, DISTRICT_CONTEXT)
        self.assertTrue(record_matches_prize(legacy, director, Scope.DISTRICT, context))
        self.assertEqual(remaining_slots(director, WinnerLedger([legacy]), Scope.DISTRICT, context), 1)

    def test_legacy_matching_can_be_disabled(self) -> None:
        ledger = WinnerLedger([_record("r1", "a", prize_id=None)])
        self.assertEqual(
            remaining_slots(
                PRESIDENT, ledger, Scope.CLUB, "ClubX", legacy_name_match=False
            ),
            2,
        )


if __name__ == "__main__":
    unittest.main()
