import random
import unittest

from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from clubdraw.db.engine import make_engine
from clubdraw.models import Base, Member, Prize, Winner
from clubdraw.prize_draw import (
    ConfirmationRequiredError,
    DrawBlockedError,
    DrawCondition,
    Participant,
    PrizeDefinition,
    Roster,
    Scope,
    WinnerRecord,
)
from clubdraw.workflows import (
    add_bonus_slot,
    clear_winners_for_scope,
    commit_winners,
    delete_winner,
    load_catalog,
    load_default_prizes,
    load_ledger,
    load_roster,
    prize_remaining_slots,
    replace_prizes,
    replace_roster,
    run_draw,
)


ROSTER = Roster(
    [
        Participant("A", "Alice", "ClubX", "Zone1"),
        Participant("B", "Bob", "ClubX", "Zone1", "社長"),
        Participant("C", "Carol", "ClubY", "Zone1"),
    ]
)


class WorkflowTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(
            bind=self.engine, future=True, expire_on_commit=False
        )
        with self.Session.begin() as session:
            replace_roster(session, ROSTER)
            replace_prizes(
                session,
                Scope.CLUB,
                "ClubX",
                [PrizeDefinition("x-1", "社長獎", 1, "紅包 $1,000", "Andy", "P")],
                zone="Zone1",
            )
            replace_prizes(
                session, Scope.DISTRICT, None, [PrizeDefinition("d-1", "總監獎", 5)]
            )

    def tearDown(self):
        self.engine.dispose()

    def _count_winners(self, session):
        return session.scalar(select(func.count()).select_from(Winner))


class LoadTests(WorkflowTestCase):
    def test_snapshots_reflect_storage(self):
        with self.Session() as session:
            roster = load_roster(session)
            self.assertEqual([p.id for p in roster], ["A", "B", "C"])
            self.assertEqual(roster.get("B").title, "社長")

            catalog = load_catalog(session)
            self.assertEqual(len(catalog), 2)
            self.assertEqual(catalog.locate("x-1"), (Scope.CLUB, "ClubX"))
            self.assertEqual(session.get(Prize, "x-1").zone, "Zone1")

            self.assertEqual(len(load_ledger(session)), 0)

    def test_load_default_prizes(self):
        with self.Session.begin() as session:
            self.assertEqual(load_default_prizes(session), 40)

        with self.Session() as session:
            catalog = load_catalog(session)
            # the district context is replaced by the built-in district prizes
            self.assertEqual(len(catalog), 41)
            self.assertNotIn("d-1", catalog)
            self.assertEqual(len(catalog.prizes_for(Scope.DISTRICT)), 7)
            self.assertEqual(catalog.get("z1-yixian-1").total_slots, 3)
            self.assertEqual(session.get(Prize, "z1-yixian-1").zone, "第一分區")


class RunDrawTests(WorkflowTestCase):
    def test_club_draw_persists_and_exhausts_prize(self):
        with self.Session.begin() as session:
            rows = run_draw(session, Scope.CLUB, "ClubX", "x-1", rng=random.Random(1))
            self.assertEqual(len(rows), 1)
            winner_id = rows[0].participant_id
            self.assertIn(winner_id, {"A", "B"})
            self.assertEqual(rows[0].scope_context, "ClubX")

        with self.Session() as session:
            self.assertEqual(prize_remaining_slots(session, "x-1"), 0)
            self.assertEqual(session.get(Prize, "x-1").winners[0].participant_id, winner_id)

        with self.assertRaises(DrawBlockedError) as ctx:
            with self.Session.begin() as session:
                run_draw(session, Scope.CLUB, "ClubX", "x-1")
        self.assertEqual(ctx.exception.condition, DrawCondition.PRIZE_EXHAUSTED)

    def test_delete_winner_returns_slot(self):
        with self.Session.begin() as session:
            record_id = run_draw(session, Scope.CLUB, "ClubX", "x-1")[0].id

        with self.Session.begin() as session:
            removed = delete_winner(session, record_id)
            self.assertEqual(removed.id, record_id)

        with self.Session() as session:
            self.assertEqual(prize_remaining_slots(session, "x-1"), 1)
            with self.assertRaises(KeyError):
                delete_winner(session, record_id)

    def test_downgrade_requires_confirmation(self):
        with self.assertRaises(ConfirmationRequiredError):
            with self.Session.begin() as session:
                run_draw(session, Scope.DISTRICT, None, "d-1")

        with self.Session.begin() as session:
            self.assertEqual(self._count_winners(session), 0)
            rows = run_draw(
                session, Scope.DISTRICT, None, "d-1", confirm_downgrade=True, rng=random.Random(2)
            )
            self.assertEqual({r.participant_id for r in rows}, {"A", "B", "C"})

        with self.Session() as session:
            self.assertEqual(prize_remaining_slots(session, "d-1"), 2)

    def test_custom_count(self):
        with self.Session.begin() as session:
            rows = run_draw(session, Scope.DISTRICT, None, "d-1", count=2)
            self.assertEqual(len(rows), 2)
        with self.Session() as session:
            self.assertEqual(prize_remaining_slots(session, "d-1"), 3)

    def test_prize_must_match_scope(self):
        with self.Session.begin() as session:
            with self.assertRaises(KeyError):
                run_draw(session, Scope.DISTRICT, None, "x-1")

    def test_wins_are_scope_local(self):
        with self.Session.begin() as session:
            run_draw(session, Scope.CLUB, "ClubX", "x-1")
            rows = run_draw(
                session, Scope.DISTRICT, None, "d-1", confirm_downgrade=True
            )
            self.assertEqual(len(rows), 3)
            self.assertEqual(self._count_winners(session), 4)


class LedgerMaintenanceTests(WorkflowTestCase):
    def test_commit_winners_rejects_whole_batch(self):
        prize = PrizeDefinition("d-1", "總監獎", 5)
        alice, bob = ROSTER.get("A"), ROSTER.get("B")
        with self.Session.begin() as session:
            commit_winners(session, [WinnerRecord.for_draw(alice, prize, Scope.DISTRICT, "全體")])

        with self.Session.begin() as session:
            with self.assertRaises(ValueError):
                commit_winners(
                    session,
                    [
                        WinnerRecord.for_draw(bob, prize, Scope.DISTRICT, "全體"),
                        WinnerRecord.for_draw(alice, prize, Scope.DISTRICT, "全體"),
                    ],
                )
            self.assertEqual(self._count_winners(session), 1)
            self.assertEqual(commit_winners(session, []), [])

    def test_clear_winners_for_scope(self):
        with self.Session.begin() as session:
            run_draw(session, Scope.CLUB, "ClubX", "x-1")
            run_draw(session, Scope.DISTRICT, None, "d-1", count=2)

        with self.Session.begin() as session:
            self.assertEqual(clear_winners_for_scope(session, Scope.CLUB), 1)
            self.assertEqual(
                {w.scope for w in Winner.all_ordered(session)}, {Scope.DISTRICT.value}
            )
            self.assertEqual(prize_remaining_slots(session, "x-1"), 1)
            self.assertEqual(clear_winners_for_scope(session, None), 2)
            self.assertEqual(self._count_winners(session), 0)

    def test_add_bonus_slot(self):
        with self.Session.begin() as session:
            run_draw(session, Scope.CLUB, "ClubX", "x-1")
            prize = add_bonus_slot(session, "x-1")
            self.assertEqual(prize.total_slots, 2)
            self.assertEqual(prize_remaining_slots(session, "x-1"), 1)
            rows = run_draw(session, Scope.CLUB, "ClubX", "x-1")
            self.assertEqual(len(rows), 1)

        with self.Session() as session:
            with self.assertRaises(KeyError):
                add_bonus_slot(session, "missing")
            with self.assertRaises(ValueError):
                add_bonus_slot(session, "x-1", 0)
            with self.assertRaises(KeyError):
                prize_remaining_slots(session, "missing")


class ReplaceRosterTests(WorkflowTestCase):
    def test_surviving_ids_are_updated_in_place(self):
        updated = Roster(
            [
                Participant("C", "Carol", "ClubY", "Zone1"),
                Participant("A", "Alice Lin", "ClubX", "Zone1"),
                Participant("D", "Dora", "ClubY", "Zone1"),
            ]
        )
        with self.Session.begin() as session:
            self.assertEqual(replace_roster(session, updated), 3)

        with self.Session() as session:
            self.assertEqual([m.id for m in Member.all_ordered(session)], ["C", "A", "D"])
            self.assertEqual(session.get(Member, "A").name, "Alice Lin")
            self.assertIsNone(session.get(Member, "B"))

    def test_orphaning_winners_is_refused(self):
        with self.Session.begin() as session:
            run_draw(session, Scope.DISTRICT, None, "d-1", confirm_downgrade=True)

        smaller = Roster([Participant("A", "Alice", "ClubX", "Zone1")])
        with self.Session.begin() as session:
            with self.assertRaises(ValueError):
                replace_roster(session, smaller)
            self.assertEqual(len(load_roster(session)), 3)

        with self.Session.begin() as session:
            replace_roster(session, smaller, clear_winners=True)
            self.assertEqual(self._count_winners(session), 0)
            self.assertEqual([p.id for p in load_roster(session)], ["A"])


class ReplacePrizesTests(WorkflowTestCase):
    def test_removed_prize_falls_back_to_name_matching(self):
        with self.Session.begin() as session:
            record_id = run_draw(session, Scope.CLUB, "ClubX", "x-1")[0].id

        with self.Session.begin() as session:
            replace_prizes(
                session,
                Scope.CLUB,
                "ClubX",
                [PrizeDefinition("x-2", "社長獎", 2)],
                zone="Zone1",
            )

        with self.Session() as session:
            self.assertIsNone(session.get(Prize, "x-1"))
            self.assertIsNone(session.get(Winner, record_id).prize_id)
            self.assertEqual(prize_remaining_slots(session, "x-2"), 1)
            self.assertEqual(
                prize_remaining_slots(session, "x-2", legacy_name_match=False), 2
            )

    def test_kept_prize_is_updated_in_place(self):
        with self.Session.begin() as session:
            record_id = run_draw(session, Scope.CLUB, "ClubX", "x-1")[0].id
            replace_prizes(
                session,
                Scope.CLUB,
                "ClubX",
                [PrizeDefinition("x-1", "社長獎", 3, "紅包 $2,000")],
            )

        with self.Session() as session:
            prize = session.get(Prize, "x-1")
            self.assertEqual((prize.total_slots, prize.item_name), (3, "紅包 $2,000"))
            self.assertEqual(prize.zone, "Zone1")
            self.assertEqual(session.get(Winner, record_id).prize_id, "x-1")
            self.assertEqual(prize_remaining_slots(session, "x-1"), 2)

    def test_id_owned_by_other_context_is_rejected(self):
        with self.Session.begin() as session:
            with self.assertRaises(ValueError):
                replace_prizes(
                    session, Scope.CLUB, "ClubY", [PrizeDefinition("d-1", "社長獎", 1)]
                )
            with self.assertRaises(ValueError):
                replace_prizes(session, Scope.ZONE, None, [PrizeDefinition("z-1", "分區長官獎", 1)])
            self.assertEqual(Prize.for_context(session, Scope.CLUB, "ClubY"), [])


if __name__ == "__main__":
    unittest.main()
