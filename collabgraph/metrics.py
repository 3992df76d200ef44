"""
collaboration metrics over one snapshot of work items.

every function here is pure: same items in, same numbers out, and nothing
is shared between calls. empty input gives zeros / empty lists, never an
exception.
"""

import logging
from collections import Counter, OrderedDict, defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from collabgraph.constants import PAIR, POST, UNKNOWN_GROUP, WAIT
from collabgraph.data_loader import WorkItem
from collabgraph.graph_builder import build_graph, resolve_groups
from collabgraph.relations import is_pair, is_wait, registered_relations

logger = logging.getLogger(__name__)


@dataclass
class CollaboratorStat:
    name: str
    relation: str            # first relation seen with this collaborator
    count: int
    relation_counts: Dict[str, int] = field(default_factory=dict)


@dataclass
class MemberSummary:
    name: str
    group: str
    pair_count: int
    wait_count: int          # outbound: I am waiting on someone
    inbound_wait: int        # someone is waiting on me
    cross_group_score: int
    cross_module_score: int
    total_collaborations: int
    relation_counts: Dict[str, int] = field(default_factory=dict)
    collaborators: List[CollaboratorStat] = field(default_factory=list)

    @property
    def post_count(self) -> int:
        return self.relation_counts.get(POST, 0)


@dataclass
class LoadRow:
    name: str
    group: str
    pair_count: int
    wait_count: int
    inbound_wait: int
    total_load: int
    relation_counts: Dict[str, int] = field(default_factory=dict)


@dataclass
class BottleneckNode:
    name: str
    group: str
    inbound_count: int
    outbound_count: int
    intensity: int
    waiters: List[str] = field(default_factory=list)    # waiting on this member
    blocking: List[str] = field(default_factory=list)   # this member is waiting on them


@dataclass
class MatrixCell:
    source_group: str
    target_group: str
    pair_count: int = 0
    wait_count: int = 0
    other_count: int = 0
    total_count: int = 0


@dataclass
class TeamTotals:
    members: int
    total_pairs: int
    total_waits: int
    total_references: int
    avg_pair_count: float


MATRIX_FILTERS = (None, 'both', PAIR, WAIT, POST)


def round_percent(part, whole) -> int:
    # half-up, not python's banker's rounding. 0 when there is nothing to divide by
    if not whole:
        return 0
    value = int(part * 100.0 / whole + 0.5)
    return max(0, min(100, value))


# simple per-member counters


def member_groups(items: Sequence[WorkItem]) -> Dict[str, str]:
    return resolve_groups(items or [])


def relation_count_per_member(items: Sequence[WorkItem], relation: str) -> Dict[str, int]:
    """owned references of one relation kind, every owner present (0 if none)"""
    counts = OrderedDict()
    for item in items or []:
        counts.setdefault(item.owner, 0)
        counts[item.owner] += sum(1 for _, rel in item.references() if rel == relation)
    return dict(counts)


def pair_count_per_member(items: Sequence[WorkItem]) -> Dict[str, int]:
    return relation_count_per_member(items, PAIR)


def wait_count_per_member(items: Sequence[WorkItem]) -> Dict[str, int]:
    return relation_count_per_member(items, WAIT)


def inbound_wait_counts(items: Sequence[WorkItem]) -> Dict[str, int]:
    """how many times each member is named as the one being waited on (reverse scan)"""
    counts = Counter()
    for item in items or []:
        for name, rel in item.references():
            if is_wait(rel) and name != item.owner:
                counts[name] += 1
    return dict(counts)


def pair_count(items, member: str) -> int:
    return pair_count_per_member(_owned(items, member)).get(member, 0)


def outbound_wait_count(items, member: str) -> int:
    return wait_count_per_member(_owned(items, member)).get(member, 0)


def inbound_wait_count(items, member: str) -> int:
    return inbound_wait_counts(items).get(member, 0)


def _owned(items, member):
    return [i for i in items or [] if i.owner == member]


# cross boundary scores


def cross_group_score(items: Sequence[WorkItem], member: str) -> int:
    groups = member_groups(items)
    own = groups.get(member)
    if not own:
        return 0

    total = 0
    crossing = 0
    for item in _owned(items, member):
        for name, _ in item.references():
            total += 1
            # a collaborator we never saw own anything has no group, so it can't cross
            other = groups.get(name)
            if other and other != own:
                crossing += 1

    return round_percent(crossing, total)


def cross_module_score(items: Sequence[WorkItem], member: str) -> int:
    """
    share of my collaborators' modules that are NOT among my own modules.
    asymmetric on purpose, dashboards already show this number
    """
    mine = _owned(items, member)
    own_modules = {i.module for i in mine if i.module}
    if not own_modules:
        return 0

    modules_by_owner = defaultdict(set)
    for item in items or []:
        if item.module:
            modules_by_owner[item.owner].add(item.module)

    collab_modules = set()
    for item in mine:
        for name, _ in item.references():
            collab_modules |= modules_by_owner.get(name, set())

    outside = len(collab_modules - own_modules)
    return round_percent(outside, len(collab_modules))


# aggregates


def member_summary(items: Sequence[WorkItem], member: str) -> MemberSummary:

    items = list(items or [])
    groups = member_groups(items)

    rel_counts = Counter()
    stats = OrderedDict()  # name -> CollaboratorStat, insertion order = first seen

    for item in _owned(items, member):
        for name, rel in item.references():
            rel_counts[rel] += 1
            stat = stats.get(name)
            if stat is None:
                stat = CollaboratorStat(name=name, relation=rel, count=0)
                stats[name] = stat
            stat.count += 1
            stat.relation_counts[rel] = stat.relation_counts.get(rel, 0) + 1

    inbound = inbound_wait_counts(items).get(member, 0)
    owned_total = sum(rel_counts.values())

    # sorted() is stable -> ties keep first-seen order
    collaborators = sorted(stats.values(), key=lambda s: s.count, reverse=True)

    return MemberSummary(
        name=member,
        group=groups.get(member, UNKNOWN_GROUP),
        pair_count=rel_counts.get(PAIR, 0),
        wait_count=rel_counts.get(WAIT, 0),
        inbound_wait=inbound,
        cross_group_score=cross_group_score(items, member),
        cross_module_score=cross_module_score(items, member),
        total_collaborations=owned_total + inbound,
        relation_counts=dict(rel_counts),
        collaborators=collaborators,
    )


def load_heatmap(items: Sequence[WorkItem]) -> List[LoadRow]:
    """one row per owner, heaviest first. inbound waits count toward load too"""

    items = list(items or [])
    groups = member_groups(items)
    inbound = inbound_wait_counts(items)

    per_owner = OrderedDict()
    for item in items:
        counts = per_owner.setdefault(item.owner, Counter())
        for _, rel in item.references():
            counts[rel] += 1

    rows = []
    for name, counts in per_owner.items():
        rel_counts = {rel: counts.get(rel, 0) for rel in registered_relations()}
        for rel, num in counts.items():
            rel_counts[rel] = num
        inbound_num = inbound.get(name, 0)
        rows.append(LoadRow(
            name=name,
            group=groups.get(name, UNKNOWN_GROUP),
            pair_count=counts.get(PAIR, 0),
            wait_count=counts.get(WAIT, 0),
            inbound_wait=inbound_num,
            total_load=sum(counts.values()) + inbound_num,
            relation_counts=rel_counts,
        ))

    return sorted(rows, key=lambda r: r.total_load, reverse=True)


def bottleneck_ranking(items: Sequence[WorkItem]) -> List[BottleneckNode]:
    """every node, not just owners. intensity is inbound against the team max"""

    items = list(items or [])
    graph = build_graph(items)

    waiters = defaultdict(list)
    blocking = defaultdict(list)
    for item in items:
        for name, rel in item.references():
            if not is_wait(rel):
                continue
            # same counting as outbound_wait / inbound_wait: a self-wait is outbound only
            blocking[item.owner].append(name)
            if name != item.owner:
                waiters[name].append(item.owner)

    max_inbound = max([n.inbound_wait for n in graph.nodes] + [1])

    ranking = [
        BottleneckNode(
            name=n.id,
            group=n.group,
            inbound_count=n.inbound_wait,
            outbound_count=n.outbound_wait,
            intensity=round_percent(n.inbound_wait, max_inbound),
            waiters=list(waiters.get(n.id, [])),
            blocking=list(blocking.get(n.id, [])),
        )
        for n in graph.nodes
    ]
    return sorted(ranking, key=lambda b: b.inbound_count, reverse=True)


def group_matrix(items: Sequence[WorkItem], relation_filter: Optional[str] = None) -> List[MatrixCell]:
    """
    dense groups x groups matrix (self pairs included, unobserved cells are zero).
    relation_filter swaps total_count for the count of that relation
    """
    if relation_filter not in MATRIX_FILTERS:
        raise ValueError(f"unsupported relation filter: {relation_filter!r}")

    items = list(items or [])
    owner_groups = member_groups(items)

    def source_group(item):
        return item.group or owner_groups.get(item.owner, UNKNOWN_GROUP)

    groups = list(OrderedDict.fromkeys(source_group(i) for i in items))
    cells = OrderedDict(
        ((s, t), MatrixCell(source_group=s, target_group=t))
        for s in groups for t in groups
    )

    for item in items:
        src = source_group(item)
        for name, rel in item.references():
            tgt = owner_groups.get(name)
            if tgt is None:
                continue
            cell = cells.get((src, tgt))
            if cell is None:
                continue
            if is_pair(rel):
                cell.pair_count += 1
            elif is_wait(rel):
                cell.wait_count += 1
            else:
                cell.other_count += 1
            cell.total_count += 1

    if relation_filter in (None, 'both'):
        return list(cells.values())

    if relation_filter == POST:
        # POST lives in other_count together with every other generic kind, recount it
        post = Counter()
        for item in items:
            for name, rel in item.references():
                tgt = owner_groups.get(name)
                if rel == POST and tgt is not None:
                    post[(source_group(item), tgt)] += 1
        for key, cell in cells.items():
            cell.total_count = post.get(key, 0)
    else:
        for cell in cells.values():
            cell.total_count = cell.pair_count if relation_filter == PAIR else cell.wait_count

    return list(cells.values())


def team_totals(items: Sequence[WorkItem]) -> TeamTotals:
    pairs = pair_count_per_member(items)
    inbound = inbound_wait_counts(items)
    total_refs = sum(1 for item in items or [] for _ in item.references())
    total_pairs = sum(pairs.values())
    return TeamTotals(
        members=len(pairs),
        total_pairs=total_pairs,
        total_waits=sum(inbound.values()),
        total_references=total_refs,
        avg_pair_count=total_pairs / max(len(pairs), 1),
    )
