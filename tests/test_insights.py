from collections import Counter

from collabgraph.insights import (
    INSIGHT_TYPES, PERSONAL_RULES, TEAM_RULES, PersonalContext, TeamContext,
    _first_max, backlog_warning, biggest_bottleneck, evaluate_rules,
    generate_personal_insights, generate_team_insights, insular_collaboration,
    no_bottleneck, repeated_wait, wait_pair_imbalance,
)
from collabgraph.metrics import MemberSummary


def summary(**kwargs):
    fields = dict(
        name='me', group='g', pair_count=0, wait_count=0, inbound_wait=0,
        cross_group_score=0, cross_module_score=0, total_collaborations=0,
    )
    fields.update(kwargs)
    return MemberSummary(**fields)


def context(avg_pair_count=0.0, wait_targets=None, previous=None, **kwargs):
    return PersonalContext(
        summary=summary(**kwargs),
        avg_pair_count=avg_pair_count,
        wait_targets=Counter(wait_targets or {}),
        previous=previous,
    )


def codes(insights):
    return [i.code for i in insights]


def test_alice(team_items):
    insights = generate_personal_insights(team_items, 'alice')
    assert codes(insights) == ['high_cross_group', 'top_collaborator', 'active_pairing', 'repeated_wait']
    top = insights[1]
    assert top.message == "You collaborated most with bob (2 times)"
    assert 'carol (2 times)' in insights[-1].message


def test_carol_is_a_bottleneck(team_items):
    insights = generate_personal_insights(team_items, 'carol')
    assert codes(insights) == ['bottleneck', 'high_cross_group', 'top_collaborator']
    assert insights[0].type == 'warning'
    assert insights[0].message.startswith('4 people')


def test_member_without_collaboration(team_items):
    assert codes(generate_personal_insights(team_items, 'erin')) == ['no_collaboration']


def test_changes_against_previous_period(team_items, previous_team_items):
    insights = generate_personal_insights(team_items, 'alice', previous_team_items)
    assert codes(insights) == [
        'high_cross_group', 'top_collaborator', 'active_pairing',
        'bottleneck_up', 'collaboration_up', 'repeated_wait',
    ]
    by_code = {i.code: i for i in insights}
    assert by_code['bottleneck_up'].message == "Bottleneck grew by 1 since the previous period"
    assert by_code['collaboration_up'].message == "Collaboration up by 5 since the previous period"


def test_bottleneck_shrinking():
    # waited on 6 times last period, 4 now
    previous = summary(inbound_wait=6, total_collaborations=7)
    ctx = context(inbound_wait=4, total_collaborations=5, previous=previous)
    assert codes(evaluate_rules(PERSONAL_RULES, ctx)) == ['bottleneck', 'bottleneck_down']


def test_single_rules():
    assert insular_collaboration(context(cross_group_score=10)).message.endswith('(90%)')
    assert insular_collaboration(context(cross_group_score=0)) is None
    assert insular_collaboration(context(cross_group_score=20)) is None
    assert backlog_warning(context(wait_count=3)).code == 'backlog'
    assert backlog_warning(context(wait_count=2)) is None
    assert no_bottleneck(context(total_collaborations=2)).type == 'success'
    assert no_bottleneck(context()) is None
    assert repeated_wait(context(wait_targets={'x': 1})) is None


def test_repeated_wait_lists_every_target():
    insight = repeated_wait(context(wait_targets={'x': 2, 'y': 3, 'z': 1}))
    assert insight.message == "Repeatedly waiting on y (3 times), x (2 times)"


def test_team_rules(team_items):
    insights = generate_team_insights(team_items)
    assert codes(insights) == ['team_bottleneck', 'team_active_pairer']
    assert insights[0].message.startswith('carol')
    assert insights[1].message.startswith('alice')


def test_wait_pair_imbalance():
    assert wait_pair_imbalance(TeamContext(inbound={'a': 4}, pairs={'b': 2})).code == 'team_wait_imbalance'
    assert wait_pair_imbalance(TeamContext(inbound={'a': 3}, pairs={'b': 2})) is None


def test_ties_go_to_the_first_member():
    assert _first_max({'a': 3, 'b': 3}) == ('a', 3)
    assert _first_max({}) == (None, 0)
    assert biggest_bottleneck(TeamContext(inbound={'a': 3, 'b': 3}, pairs={})).message.startswith('a ')


def test_every_rule_yields_known_types(team_items):
    for member in ('alice', 'bob', 'carol', 'dave', 'erin', 'frank', 'zed'):
        for insight in generate_personal_insights(team_items, member):
            assert insight.type in INSIGHT_TYPES
    assert len(PERSONAL_RULES) == 11
    assert len(TEAM_RULES) == 3


def test_empty_input():
    assert codes(generate_personal_insights([], 'nobody')) == ['no_collaboration']
    assert generate_team_insights([]) == []
