# rule based insight messages. each rule looks at one precomputed context and
# either says something or returns None. no rule knows about any other rule.
# thresholds come from constants.py and are fixed on purpose

from collections import Counter
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from collabgraph.constants import (
    BACKLOG_OUTBOUND_MIN, BOTTLENECK_INBOUND_MIN, COLLAB_JUMP_MIN,
    HIGH_CROSS_GROUP_SCORE, INSULAR_CROSS_GROUP_MAX, PAIR_ABOVE_AVERAGE_RATIO,
    REPEATED_WAIT_MIN, TEAM_ACTIVE_PAIR_MIN, TEAM_BOTTLENECK_INBOUND_MIN,
    TEAM_WAIT_PAIR_RATIO,
)
from collabgraph.data_loader import WorkItem
from collabgraph.metrics import (
    MemberSummary, inbound_wait_counts, member_summary, pair_count_per_member,
)
from collabgraph.relations import is_wait

WARNING = 'warning'
SUCCESS = 'success'
INFO = 'info'
NEUTRAL = 'neutral'

INSIGHT_TYPES = (WARNING, SUCCESS, INFO, NEUTRAL)


@dataclass(frozen=True)
class Insight:
    type: str
    code: str
    message: str
    detail: Optional[str] = None


@dataclass(frozen=True)
class PersonalContext:
    summary: MemberSummary
    avg_pair_count: float
    wait_targets: Counter                   # who I wait on, and how often
    previous: Optional[MemberSummary] = None


@dataclass(frozen=True)
class TeamContext:
    inbound: dict
    pairs: dict


# personal rules


def bottleneck_warning(ctx: PersonalContext) -> Optional[Insight]:
    n = ctx.summary.inbound_wait
    if n >= BOTTLENECK_INBOUND_MIN:
        return Insight(WARNING, 'bottleneck', f"{n} people are waiting on your work",
                       "Consider raising the priority of the work others depend on.")
    return None


def no_bottleneck(ctx: PersonalContext) -> Optional[Insight]:
    s = ctx.summary
    if s.inbound_wait == 0 and s.total_collaborations > 0:
        return Insight(SUCCESS, 'no_bottleneck', "No bottleneck: nobody is waiting on you")
    return None


def high_cross_group(ctx: PersonalContext) -> Optional[Insight]:
    score = ctx.summary.cross_group_score
    if score >= HIGH_CROSS_GROUP_SCORE:
        return Insight(SUCCESS, 'high_cross_group', f"High cross-group collaboration ({score}%)",
                       "You are working well across teams.")
    return None


def insular_collaboration(ctx: PersonalContext) -> Optional[Insight]:
    score = ctx.summary.cross_group_score
    if 0 < score < INSULAR_CROSS_GROUP_MAX:
        return Insight(NEUTRAL, 'insular', f"Mostly collaborating inside your own group ({100 - score}%)",
                       "Consider reaching out to other groups where it helps.")
    return None


def top_collaborator(ctx: PersonalContext) -> Optional[Insight]:
    if not ctx.summary.collaborators:
        return None
    top = ctx.summary.collaborators[0]
    return Insight(INFO, 'top_collaborator', f"You collaborated most with {top.name} ({top.count} times)")


def above_average_pairing(ctx: PersonalContext) -> Optional[Insight]:
    s = ctx.summary
    if s.pair_count > ctx.avg_pair_count * PAIR_ABOVE_AVERAGE_RATIO:
        return Insight(SUCCESS, 'active_pairing',
                       f"Pairing more than average ({s.pair_count} vs team average {round(ctx.avg_pair_count)})")
    return None


def backlog_warning(ctx: PersonalContext) -> Optional[Insight]:
    n = ctx.summary.wait_count
    if n >= BACKLOG_OUTBOUND_MIN:
        return Insight(WARNING, 'backlog', f"{n} of your items are waiting on someone else",
                       "Check on the progress of the work you depend on.")
    return None


def inbound_delta(ctx: PersonalContext) -> Optional[Insight]:
    if ctx.previous is None:
        return None
    diff = ctx.summary.inbound_wait - ctx.previous.inbound_wait
    if diff > 0:
        return Insight(WARNING, 'bottleneck_up', f"Bottleneck grew by {diff} since the previous period")
    if diff < 0:
        return Insight(SUCCESS, 'bottleneck_down', f"Bottleneck shrank by {-diff} since the previous period")
    return None


def collaboration_jump(ctx: PersonalContext) -> Optional[Insight]:
    if ctx.previous is None:
        return None
    diff = ctx.summary.total_collaborations - ctx.previous.total_collaborations
    if diff > COLLAB_JUMP_MIN:
        return Insight(INFO, 'collaboration_up', f"Collaboration up by {diff} since the previous period")
    return None


def repeated_wait(ctx: PersonalContext) -> Optional[Insight]:
    repeated = [(name, n) for name, n in ctx.wait_targets.most_common() if n >= REPEATED_WAIT_MIN]
    if not repeated:
        return None
    names = ', '.join(f"{name} ({n} times)" for name, n in repeated)
    return Insight(NEUTRAL, 'repeated_wait', f"Repeatedly waiting on {names}",
                   "Worth reviewing this dependency pattern.")


def no_collaboration(ctx: PersonalContext) -> Optional[Insight]:
    if ctx.summary.total_collaborations == 0:
        return Insight(NEUTRAL, 'no_collaboration', "No collaboration recorded this period",
                       "If you worked with someone, add them to your items.")
    return None


PERSONAL_RULES: List[Callable[[PersonalContext], Optional[Insight]]] = [
    bottleneck_warning,
    no_bottleneck,
    high_cross_group,
    insular_collaboration,
    top_collaborator,
    above_average_pairing,
    backlog_warning,
    inbound_delta,
    collaboration_jump,
    repeated_wait,
    no_collaboration,
]


# team rules


def _first_max(counts: dict):
    # strict > keeps the first member in input order on ties
    best, best_name = 0, None
    for name, n in counts.items():
        if n > best:
            best, best_name = n, name
    return best_name, best


def biggest_bottleneck(ctx: TeamContext) -> Optional[Insight]:
    name, n = _first_max(ctx.inbound)
    if n >= TEAM_BOTTLENECK_INBOUND_MIN:
        return Insight(WARNING, 'team_bottleneck', f"{name} is the biggest bottleneck ({n} waiting)",
                       "Check this member's workload.")
    return None


def most_active_pairer(ctx: TeamContext) -> Optional[Insight]:
    name, n = _first_max(ctx.pairs)
    if n >= TEAM_ACTIVE_PAIR_MIN:
        return Insight(INFO, 'team_active_pairer', f"{name} is pairing the most ({n} pair sessions)")
    return None


def wait_pair_imbalance(ctx: TeamContext) -> Optional[Insight]:
    waits = sum(ctx.inbound.values())
    pairs = sum(ctx.pairs.values())
    if waits > pairs * TEAM_WAIT_PAIR_RATIO:
        return Insight(WARNING, 'team_wait_imbalance', "The team has a lot of waiting relationships",
                       f"{waits} wait vs {pairs} pair")
    return None


TEAM_RULES: List[Callable[[TeamContext], Optional[Insight]]] = [
    biggest_bottleneck,
    most_active_pairer,
    wait_pair_imbalance,
]


# entry points


def personal_context(
    items: Sequence[WorkItem],
    member: str,
    previous_items: Optional[Sequence[WorkItem]] = None,
) -> PersonalContext:

    items = list(items or [])
    pairs = pair_count_per_member(items)

    targets = Counter()
    for item in items:
        if item.owner != member:
            continue
        for name, rel in item.references():
            if is_wait(rel):
                targets[name] += 1

    previous = None
    if previous_items is not None:
        previous = member_summary(previous_items, member)

    return PersonalContext(
        summary=member_summary(items, member),
        avg_pair_count=sum(pairs.values()) / max(len(pairs), 1),
        wait_targets=targets,
        previous=previous,
    )


def evaluate_rules(rules, ctx) -> List[Insight]:
    out = []
    for rule in rules:
        insight = rule(ctx)
        if insight is not None:
            out.append(insight)
    return out


def generate_personal_insights(
    items: Sequence[WorkItem],
    member: str,
    previous_items: Optional[Sequence[WorkItem]] = None,
) -> List[Insight]:
    return evaluate_rules(PERSONAL_RULES, personal_context(items, member, previous_items))


def generate_team_insights(items: Sequence[WorkItem]) -> List[Insight]:
    ctx = TeamContext(inbound=inbound_wait_counts(items), pairs=pair_count_per_member(items))
    return evaluate_rules(TEAM_RULES, ctx)
