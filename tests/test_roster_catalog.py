from __future__ import annotations

import unittest

from clubdraw.defaults import (
    CLUB_PRIZE_NAME,
    ZONE_PRIZE_NAME,
    ZONES,
    default_catalog,
    default_prize_entries,
    demo_roster,
)
from clubdraw.prize_draw import (
    Participant,
    PrizeCatalog,
    PrizeDefinition,
    Roster,
    Scope,
    build_roster,
)


class RosterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.roster = Roster(
            [
                Participant("a", "Alice", "ClubX", "Zone1"),
                Participant("b", "Bob", "ClubY", "Zone1"),
                Participant("c", "Carol", "ClubZ", "Zone2", "社長"),
            ]
        )

    def test_lookup(self) -> None:
        self.assertEqual(len(self.roster), 3)
        self.assertIn("a", self.roster)
        self.assertNotIn("zz", self.roster)
        self.assertEqual(self.roster.get("c").title, "社長")
        self.assertIsNone(self.roster.get("zz"))
        self.assertEqual(self.roster.ids, frozenset({"a", "b", "c"}))

    def test_zone_and_club_listing(self) -> None:
        self.assertEqual(self.roster.zones(), ["Zone1", "Zone2"])
        self.assertEqual(self.roster.clubs(), ["ClubX", "ClubY", "ClubZ"])
        self.assertEqual(self.roster.clubs("Zone1"), ["ClubX", "ClubY"])
        self.assertEqual(
            self.roster.zone_clubs(), {"Zone1": ["ClubX", "ClubY"], "Zone2": ["ClubZ"]}
        )

    def test_duplicate_ids_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Roster([Participant("a", "A", "C", "Z"), Participant("a", "B", "C", "Z")])


class BuildRosterTests(unittest.TestCase):
    def test_registration_sheet_headers(self) -> None:
        result = build_roster(
            [
                {"編號": "m-1", "姓名": "王小明", "社團": "逸仙", "分區": "第一分區", "職稱": "社長"},
                {"name": "Bob", "club": "南區", "zone": "第一分區"},
            ]
        )
        self.assertTrue(result.success)
        self.assertEqual([p.id for p in result.roster], ["m-1", "p-3"])
        first = result.roster.get("m-1")
        self.assertEqual((first.name, first.club, first.zone, first.title), ("王小明", "逸仙", "第一分區", "社長"))
        self.assertIsNone(result.roster.get("p-3").title)

    def test_values_are_stripped_and_stringified(self) -> None:
        result = build_roster([{"id": 7, "name": "  Ann ", "club": "C", "zone": "Z"}])
        participant = result.roster.participants[0]
        self.assertEqual(participant.id, "7")
        self.assertEqual(participant.name, "Ann")

    def test_incomplete_rows_are_reported_and_skipped(self) -> None:
        result = build_roster(
            [
                {"name": "", "club": "C", "zone": "Z"},
                {"name": "Ann", "zone": "Z"},
                {"name": "Ben", "club": "C", "zone": "  "},
                {"name": "Cat", "club": "C", "zone": "Z"},
            ]
        )
        self.assertFalse(result.success)
        self.assertEqual(len(result.roster), 1)
        self.assertEqual(
            [(issue.row, issue.column) for issue in result.issues],
            [(2, "姓名"), (3, "社團"), (4, "分區")],
        )

    def test_duplicate_ids_keep_first_row(self) -> None:
        result = build_roster(
            [
                {"id": "x", "name": "Ann", "club": "C", "zone": "Z"},
                {"id": "x", "name": "Ben", "club": "C", "zone": "Z"},
            ],
            first_row=10,
        )
        self.assertEqual([p.name for p in result.roster], ["Ann"])
        self.assertEqual(result.issues[0].row, 11)
        self.assertIn("duplicate", result.issues[0].message)

    def test_empty_input(self) -> None:
        result = build_roster([])
        self.assertFalse(result.success)
        self.assertEqual(len(result.roster), 0)
        self.assertEqual(result.issues[0].row, 0)


class PrizeCatalogTests(unittest.TestCase):
    def setUp(self) -> None:
        self.catalog = PrizeCatalog()
        self.catalog.replace(
            Scope.DISTRICT,
            None,
            [PrizeDefinition("d-1", "總監獎", 1), PrizeDefinition("d-2", "前總監獎", 2)],
        )
        self.catalog.replace(Scope.ZONE, "Zone1", [PrizeDefinition("z-1", "分區長官獎", 3)])
        self.catalog.replace(Scope.CLUB, "ClubX", [PrizeDefinition("x-1", "社長獎", 1)])

    def test_prizes_for_context(self) -> None:
        self.assertEqual([p.id for p in self.catalog.prizes_for(Scope.DISTRICT)], ["d-1", "d-2"])
        self.assertEqual([p.id for p in self.catalog.prizes_for(Scope.ZONE, "Zone1")], ["z-1"])
        self.assertEqual(self.catalog.prizes_for(Scope.ZONE, "Zone2"), [])
        self.assertEqual(self.catalog.prizes_for(Scope.CLUB), [])
        self.assertEqual(len(self.catalog), 4)
        self.assertIn("x-1", self.catalog)

    def test_locate_and_get(self) -> None:
        self.assertEqual(self.catalog.locate("d-2"), (Scope.DISTRICT, "全體"))
        self.assertEqual(self.catalog.locate("x-1"), (Scope.CLUB, "ClubX"))
        self.assertEqual(self.catalog.get("z-1").total_slots, 3)
        with self.assertRaises(KeyError):
            self.catalog.get("missing")

    def test_replace_swaps_a_context(self) -> None:
        self.catalog.replace(Scope.CLUB, "ClubX", [PrizeDefinition("x-2", "社長獎", 2)])
        self.assertNotIn("x-1", self.catalog)
        self.assertEqual([p.id for p in self.catalog.prizes_for(Scope.CLUB, "ClubX")], ["x-2"])
        self.catalog.replace(Scope.CLUB, "ClubX", [])
        self.assertEqual(self.catalog.prizes_for(Scope.CLUB, "ClubX"), [])
        self.assertEqual(len(self.catalog), 3)

    def test_replace_rejects_bad_ids(self) -> None:
        with self.assertRaises(ValueError):
            self.catalog.replace(Scope.CLUB, "ClubY", [PrizeDefinition("z-1", "社長獎", 1)])
        with self.assertRaises(ValueError):
            self.catalog.replace(
                Scope.CLUB,
                "ClubY",
                [PrizeDefinition("y-1", "社長獎", 1), PrizeDefinition("y-1", "社長獎", 1)],
            )
        with self.assertRaises(ValueError):
            self.catalog.replace(Scope.ZONE, None, [PrizeDefinition("z-9", "分區長官獎", 1)])
        self.assertEqual(self.catalog.prizes_for(Scope.CLUB, "ClubY"), [])

    def test_add_bonus_and_totals(self) -> None:
        updated = self.catalog.add_bonus("x-1", 2)
        self.assertEqual(updated.total_slots, 3)
        self.assertEqual(self.catalog.get("x-1").total_slots, 3)
        self.assertEqual(
            self.catalog.slot_totals(), {Scope.DISTRICT: 3, Scope.ZONE: 3, Scope.CLUB: 3}
        )
        with self.assertRaises(KeyError):
            self.catalog.add_bonus("missing")

    def test_clear(self) -> None:
        self.catalog.clear()
        self.assertEqual(len(self.catalog), 0)
        self.assertEqual(list(self.catalog), [])


class DefaultsTests(unittest.TestCase):
    def test_default_catalog_layout(self) -> None:
        catalog = default_catalog()
        self.assertEqual(len(catalog), 40)
        self.assertEqual(len(catalog.prizes_for(Scope.DISTRICT)), 7)
        self.assertEqual(
            catalog.slot_totals(), {Scope.DISTRICT: 7, Scope.ZONE: 76, Scope.CLUB: 44}
        )
        zone_prizes = catalog.prizes_for(Scope.ZONE, "第四分區")
        self.assertEqual([p.id for p in zone_prizes], ["z4-cgs-1", "z4-dag-1", "z4-ag-1"])
        self.assertTrue(all(p.name == ZONE_PRIZE_NAME for p in zone_prizes))
        self.assertEqual(catalog.prizes_for(Scope.CLUB, "逸仙")[0].name, CLUB_PRIZE_NAME)

    def test_club_entries_record_their_zone(self) -> None:
        for entry in default_prize_entries():
            if entry.scope is Scope.DISTRICT:
                self.assertIsNone(entry.zone)
            else:
                self.assertIn(entry.zone, ZONES)

    def test_demo_roster(self) -> None:
        roster = demo_roster(2)
        self.assertEqual(len(roster), 42)
        self.assertEqual(roster.zones(), sorted(ZONES))
        self.assertEqual(roster.get("p-1").title, "社長")
        self.assertEqual(roster.get("p-2").title, "社員")
        with self.assertRaises(ValueError):
            demo_roster(0)


if __name__ == "__main__":
    unittest.main()
