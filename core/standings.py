"""
Standings: per-participant score totals and a tie-grouped ranking.

Scores stay exact Fractions until the report is rendered.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Dict, Iterable, List, Tuple

from core.events import Event, Identifier

EMPTY_STANDINGS = "No scores yet: get programming!\n"

Entry = Tuple[Identifier, Fraction]
RankGroup = Tuple[int, List[Entry]]


def aggregate(events: Iterable[Event]) -> Dict[Identifier, Fraction]:
    totals: Dict[Identifier, Fraction] = {}
    for e in events:
        totals[e.participant] = totals.get(e.participant, Fraction(0)) + e.score()
    return totals


def rank(scores: Dict[Identifier, Fraction]) -> List[RankGroup]:
    """
    Order by score descending then Identifier ascending, grouping equal
    scores under one shared position. Positions follow competition ranking:
    1, 2, 2, 4.
    """
    ordered = sorted(scores.items(), key=lambda item: (-item[1], item[0]))

    groups: List[RankGroup] = []
    position = 1
    for identifier, score in ordered:
        if groups and groups[-1][1][0][1] == score:
            groups[-1][1].append((identifier, score))
            continue
        if groups:
            position += len(groups[-1][1])
        groups.append((position, [(identifier, score)]))
    return groups


def format_standings(ranked: List[RankGroup]) -> str:
    rows = []
    for position, entries in ranked:
        for index, (identifier, score) in enumerate(entries):
            label = f"{position})" if index == 0 else ""
            rows.append((label, identifier.name, f"{float(score):.2f}"))

    if not rows:
        return EMPTY_STANDINGS

    pos_width = max(len(r[0]) for r in rows)
    name_width = max(len(r[1]) for r in rows)
    score_width = max(len(r[2]) for r in rows)

    return "".join(
        f"{label:>{pos_width}} {name:<{name_width}}  {score:>{score_width}}\n"
        for label, name, score in rows
    )


def standings_report(events: List[Event]) -> str:
    if not events:
        return EMPTY_STANDINGS
    return format_standings(rank(aggregate(events)))
