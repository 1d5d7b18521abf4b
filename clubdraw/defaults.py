"""Built-in prize catalog and a generated demo roster for the district event.

Stage one draws the club presidents' prizes (``CLUB``), stage two the zone
officers' prizes (``ZONE``) and stage three the district officers' prizes
(``DISTRICT``).
"""

from __future__ import annotations

from typing import Iterator, NamedTuple, Optional

from .prize_draw.catalog import PrizeCatalog
from .prize_draw.roster import Roster
from .prize_draw.types import Participant, PrizeDefinition, Scope

CLUB_PRIZE_NAME = "社長獎"
ZONE_PRIZE_NAME = "分區長官獎"

ZONES = ("第一分區", "第四分區", "第五分區")

# (zone, club, prize id, item, slots, sponsor, sponsor title)
_CLUB_PRIZES = (
    ("第一分區", "南區", "z1-nanqu-1", "紅包 $2,000", 3, "Queenie", "P"),
    ("第一分區", "逸仙", "z1-yixian-1", "紅包 $1,000", 3, "Susan", "P"),
    ("第一分區", "逸天", "z1-yitian-1", "紅包 $1,000", 1, "Jim", "P"),
    ("第一分區", "雲聯網", "z1-yunlian-1", "紅包 $1,000", 2, "Jennifer", "P"),
    ("第一分區", "逸澤", "z1-yize-1", "紅包 $1,000", 2, "Andy", "P"),
    ("第一分區", "黃埔", "z1-huangpu-1", "禮品一份", 1, "Alex", "P"),
    ("第一分區", "逸新", "z1-yixin-1", "紅包 $1,000", 3, "Sandy", "P"),
    ("第一分區", "蘭亭鐵馬", "z1-lanting-1", "酒 1 瓶", 1, "Wine", "CP"),
    ("第一分區", "銀河", "z1-yinhe-1", "待確認", 0, None, "P"),
    ("第四分區", "南欣", "z4-nanxin-1", "Edenred即享卡 $1,000", 2, "William", "P"),
    ("第四分區", "松山", "z4-songshan-1", "紅包 $1,000", 2, "MB", "P"),
    ("第四分區", "民生", "z4-minsheng-1", "年節禮盒", 2, "Dawson", "P"),
    ("第四分區", "松青", "z4-songqing-1", "紅包 $1,000", 2, "Tony", "P"),
    ("第四分區", "政愛", "z4-zhengai-1", "連建興聯名款紅酒", 2, "Alex", "P"),
    ("第四分區", "添愛", "z4-tianai-1", "威士忌酒", 2, "Jerry", "P"),
    ("第四分區", "泰愛", "z4-taiai-1", "陶板屋套餐 (2張/份)", 2, "Lian", "P"),
    ("第四分區", "文化", "z4-wenhua-1", "連建興聯名款紅酒", 2, "Sky", "P"),
    ("第五分區", "府門", "z5-fumen-1", "紅包 $1,500", 3, "Card", "P"),
    ("第五分區", "南陽", "z5-nanyang-1", "紅包 $1,500", 3, "Michael", "P"),
    ("第五分區", "明星", "z5-mingxing-1", "紅包 $1,500", 3, "Mandy", "P"),
    ("第五分區", "風雲", "z5-fengyun-1", "紅包 $1,500", 3, "Reis", "P"),
)

# (zone, prize id, item, slots, sponsor, sponsor title)
_ZONE_PRIZES = (
    ("第一分區", "z1-cgs-1", "日式健走杖 (價值$3,500)", 1, "Catherine", "CGS"),
    ("第一分區", "z1-dag-1", "醫療級靈芝多醣體面膜 (價值$900/盒)", 3, "Edward", "DAG"),
    ("第一分區", "z1-ag-1", "紅蔘精華飲 (價值$3,210/盒)", 10, "Amrita", "AG"),
    ("第一分區", "z1-ag-2", "紅包 $3,000", 2, "Amrita", "AG"),
    ("第四分區", "z4-cgs-1", "紅包 $1,000", 2, "Olin", "CGS"),
    ("第四分區", "z4-dag-1", "央行馬年紀念幣", 20, "Daniel", "DAG"),
    ("第四分區", "z4-ag-1", "紐西蘭空運櫻桃", 10, "Fruit", "AG"),
    ("第五分區", "z5-cgs-1", "紅包 $2,000", 3, "Michelle", "CGS"),
    ("第五分區", "z5-dag-1", "紅包 $2,000", 3, "Archi", "DAG"),
    ("第五分區", "z5-ag-1", "茶葉禮盒", 20, "Peter", "AG"),
    ("第五分區", "z5-ag-2", "紅包 $3,000", 1, "Peter", "AG"),
    ("第五分區", "z5-ag-3", "紅包 $2,000", 1, "Peter", "AG"),
)

# (prize id, name, item, slots, sponsor, sponsor title)
_DISTRICT_PRIZES = (
    ("dist-dg-1", "總監獎", "皇家禮炮威士忌酒 21年份", 1, "Jenny", "DG"),
    ("dist-dge-1", "總監當選人獎", "曼谷來回機票", 1, "Jessy", "DGE"),
    ("dist-dgn-1", "總監提名人獎", "紅包 $3,000", 1, "Joy", "DGN"),
    ("dist-dgnd-1", "指定總監提名人獎", "禮品 1 份", 1, "Y.C", "DGND"),
    ("dist-ds-1", "地區秘書長獎", "家樂福禮券 $5,000", 1, "Steven", "DS"),
    ("dist-pdg-1", "前總監獎", "紅包 $3,000", 1, "Jack Chu", "PDG"),
    ("dist-pdg-2", "前總監獎", "絲巾一條", 1, "Tiffany", "PDG"),
)


class CatalogEntry(NamedTuple):
    """A default prize together with the context it is drawn in."""

    scope: Scope
    filter_value: Optional[str]
    zone: Optional[str]
    prize: PrizeDefinition


def default_prize_entries() -> Iterator[CatalogEntry]:
    """Yield every built-in prize, club prizes first."""

    for zone, club, prize_id, item, slots, sponsor, title in _CLUB_PRIZES:
        yield CatalogEntry(
            Scope.CLUB,
            club,
            zone,
            PrizeDefinition(prize_id, CLUB_PRIZE_NAME, slots, item, sponsor, title),
        )
    for zone, prize_id, item, slots, sponsor, title in _ZONE_PRIZES:
        yield CatalogEntry(
            Scope.ZONE,
            zone,
            zone,
            PrizeDefinition(prize_id, ZONE_PRIZE_NAME, slots, item, sponsor, title),
        )
    for prize_id, name, item, slots, sponsor, title in _DISTRICT_PRIZES:
        yield CatalogEntry(
            Scope.DISTRICT,
            None,
            None,
            PrizeDefinition(prize_id, name, slots, item, sponsor, title),
        )


def default_catalog() -> PrizeCatalog:
    """Return a fresh :class:`PrizeCatalog` loaded with the built-in prizes."""

    grouped: dict[tuple[Scope, Optional[str]], list[PrizeDefinition]] = {}
    for entry in default_prize_entries():
        grouped.setdefault((entry.scope, entry.filter_value), []).append(entry.prize)

    catalog = PrizeCatalog()
    for (scope, filter_value), prizes in grouped.items():
        catalog.replace(scope, filter_value, prizes)
    return catalog


def demo_roster(members_per_club: int = 20) -> Roster:
    """Generate a placeholder roster covering every club in the catalog.

    The first member of each club carries the title ``"社長"`` (president).
    """

    if members_per_club < 1:
        raise ValueError("members_per_club must be at least 1")

    participants: list[Participant] = []
    counter = 1
    for zone, club, *_rest in _CLUB_PRIZES:
        for seat in range(1, members_per_club + 1):
            participants.append(
                Participant(
                    id=f"p-{counter}",
                    name=f"社員 {counter}",
                    club=club,
                    zone=zone,
                    title="社長" if seat == 1 else "社員",
                )
            )
            counter += 1
    return Roster(participants)


__all__ = [
    "CLUB_PRIZE_NAME",
    "CatalogEntry",
    "ZONES",
    "ZONE_PRIZE_NAME",
    "default_catalog",
    "default_prize_entries",
    "demo_roster",
]
