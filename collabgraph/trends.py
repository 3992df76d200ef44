# week over week views: collaboration volume, bottleneck timeline, radar profile

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from collabgraph.constants import PAIR, POST, TIMELINE_ANOMALY_MIN_WEEKS, TIMELINE_ANOMALY_SIGMA, WAIT
from collabgraph.data_loader import WeekData
from collabgraph.metrics import (
    inbound_wait_counts, member_summary, pair_count_per_member, round_percent,
    wait_count_per_member,
)
from collabgraph.relations import is_wait


@dataclass
class WeekTrend:
    key: str
    label: str
    pair: int
    wait: int
    post: int
    total: int


@dataclass
class TimelinePoint:
    key: str
    label: str
    inbound: int
    outbound: int
    is_anomaly: bool = False


@dataclass
class RadarAxis:
    axis: str
    value: int
    raw: object


@dataclass
class RadarProfile:
    member: str
    axes: List[RadarAxis] = field(default_factory=list)

    def as_dict(self) -> Dict[str, int]:
        return {a.axis: a.value for a in self.axes}


def weekly_trend(weeks: Sequence[WeekData], member: Optional[str] = None) -> List[WeekTrend]:
    """owned references per week, for one member or (member=None) the whole team"""
    rows = []
    for week in weeks or []:
        counts = Counter()
        for item in week.items:
            if member is not None and item.owner != member:
                continue
            for _, rel in item.references():
                counts[rel] += 1
        rows.append(WeekTrend(
            key=week.key,
            label=week.label,
            pair=counts.get(PAIR, 0),
            wait=counts.get(WAIT, 0),
            post=counts.get(POST, 0),
            total=sum(counts.values()),
        ))
    return rows


def bottleneck_timeline(weeks: Sequence[WeekData], member: str) -> List[TimelinePoint]:

    rows = []
    for week in weeks or []:
        outbound = 0
        for item in week.items:
            if item.owner == member:
                outbound += sum(1 for _, rel in item.references() if is_wait(rel))
        rows.append(TimelinePoint(
            key=week.key,
            label=week.label,
            inbound=inbound_wait_counts(week.items).get(member, 0),
            outbound=outbound,
        ))

    flagged = {id(p) for p in timeline_anomalies(rows)}
    for p in rows:
        p.is_anomaly = id(p) in flagged
    return rows


def timeline_delta(rows: Sequence[TimelinePoint]) -> Optional[Dict[str, int]]:
    # last week minus the one before
    if len(rows) < 2:
        return None
    recent, previous = rows[-1], rows[-2]
    return {
        'inbound': recent.inbound - previous.inbound,
        'outbound': recent.outbound - previous.outbound,
    }


def timeline_anomalies(rows: Sequence[TimelinePoint]) -> List[TimelinePoint]:
    """weeks whose inbound sits above mean + 1.5 sigma (population std)"""
    if len(rows) < TIMELINE_ANOMALY_MIN_WEEKS:
        return []
    inbound = np.array([p.inbound for p in rows], dtype=float)
    cutoff = inbound.mean() + inbound.std() * TIMELINE_ANOMALY_SIGMA
    return [p for p, v in zip(rows, inbound) if v > cutoff]


def radar_profile(items, member: str) -> RadarProfile:
    """five 0-100 axes; counts are scaled against the team max (min denominator 1)"""

    items = list(items or [])
    summary = member_summary(items, member)

    max_pair = max(list(pair_count_per_member(items).values()) + [1])
    max_out = max(list(wait_count_per_member(items).values()) + [1])
    max_in = max(list(inbound_wait_counts(items).values()) + [1])

    return RadarProfile(member=member, axes=[
        RadarAxis('pair', round_percent(summary.pair_count, max_pair), summary.pair_count),
        RadarAxis('outbound_wait', round_percent(summary.wait_count, max_out), summary.wait_count),
        RadarAxis('inbound_wait', round_percent(summary.inbound_wait, max_in), summary.inbound_wait),
        RadarAxis('cross_group', summary.cross_group_score, f"{summary.cross_group_score}%"),
        RadarAxis('cross_module', summary.cross_module_score, f"{summary.cross_module_score}%"),
    ])
