import pytest

from collabgraph.data_loader import parse_items
from collabgraph.metrics import (
    bottleneck_ranking, cross_group_score, cross_module_score, group_matrix,
    inbound_wait_count, inbound_wait_counts, load_heatmap, member_summary,
    outbound_wait_count, pair_count, pair_count_per_member, relation_count_per_member,
    round_percent, team_totals, wait_count_per_member,
)


@pytest.mark.parametrize('part, whole, expected', [
    (1, 3, 33),
    (2, 3, 67),
    (1, 8, 13),     # 12.5 rounds up
    (1, 2, 50),
    (0, 0, 0),
    (5, 4, 100),
])
def test_round_percent(part, whole, expected):
    assert round_percent(part, whole) == expected


def test_small_team_example(spec_items):
    assert inbound_wait_counts(spec_items) == {'C': 1}
    assert outbound_wait_count(spec_items, 'B') == 1
    assert cross_group_score(spec_items, 'A') == 100
    top = bottleneck_ranking(spec_items)[0]
    assert (top.name, top.intensity) == ('C', 100)


def test_per_member_counts(team_items):
    assert pair_count_per_member(team_items) == {
        'alice': 3, 'bob': 1, 'carol': 0, 'dave': 0, 'erin': 0, 'frank': 0,
    }
    assert wait_count_per_member(team_items)['dave'] == 2
    assert relation_count_per_member(team_items, 'post') == {
        'alice': 0, 'bob': 0, 'carol': 1, 'dave': 0, 'erin': 0, 'frank': 0,
    }
    assert inbound_wait_counts(team_items) == {'carol': 4, 'alice': 1, 'zed': 1}
    assert pair_count(team_items, 'alice') == 3
    assert inbound_wait_count(team_items, 'erin') == 0


def test_cross_group_scores(team_items):
    assert cross_group_score(team_items, 'alice') == 60
    assert cross_group_score(team_items, 'bob') == 50
    assert cross_group_score(team_items, 'carol') == 100
    # no group of its own
    assert cross_group_score(team_items, 'frank') == 0
    # no references at all
    assert cross_group_score(team_items, 'erin') == 0


def test_cross_module_scores(team_items, spec_items):
    assert cross_module_score(team_items, 'alice') == 50
    assert cross_module_score(team_items, 'bob') == 67
    # collaborator zed has no modules
    assert cross_module_score(team_items, 'frank') == 0
    # nobody in the small example has a module
    assert cross_module_score(spec_items, 'A') == 0


def test_scores_stay_in_bounds(team_items):
    for member in ('alice', 'bob', 'carol', 'dave', 'erin', 'frank', 'zed', 'ghost'):
        assert 0 <= cross_group_score(team_items, member) <= 100
        assert 0 <= cross_module_score(team_items, member) <= 100
    # erin owns an item with no references
    assert cross_group_score(team_items, 'erin') == 0
    assert cross_module_score(team_items, 'erin') == 0


def test_member_summary(team_items):
    s = member_summary(team_items, 'alice')
    assert s.group == 'backend'
    assert (s.pair_count, s.wait_count, s.inbound_wait) == (3, 2, 1)
    assert s.total_collaborations == 6
    assert s.relation_counts == {'pair': 3, 'pre': 2}
    assert s.post_count == 0
    # count desc, ties by first appearance
    assert [(c.name, c.count, c.relation) for c in s.collaborators] == [
        ('bob', 2, 'pair'), ('carol', 2, 'pre'), ('dave', 1, 'pair'),
    ]


def test_member_summary_for_unknown_member(team_items):
    s = member_summary(team_items, 'ghost')
    assert s.group == 'Unknown'
    assert s.total_collaborations == 0
    assert s.collaborators == []


def test_load_heatmap(team_items):
    rows = load_heatmap(team_items)
    assert [r.name for r in rows] == ['alice', 'carol', 'bob', 'dave', 'frank', 'erin']
    carol = rows[1]
    assert carol.total_load == 5
    assert carol.inbound_wait == 4
    assert carol.relation_counts['post'] == 1
    assert carol.relation_counts['review'] == 0
    # zed never owns an item, so no row
    assert 'zed' not in [r.name for r in rows]


def test_bottleneck_ranking(team_items):
    ranking = bottleneck_ranking(team_items)
    assert [b.name for b in ranking[:3]] == ['carol', 'alice', 'zed']
    carol = ranking[0]
    assert carol.intensity == 100
    assert set(carol.waiters) == {'alice', 'bob', 'dave'}
    assert ranking[1].intensity == 25
    assert ranking[1].blocking == ['carol', 'carol']
    assert len(ranking) == 7


def test_bottleneck_lists_match_counts_with_self_waits():
    items = parse_items([
        {'owner': 'a', 'collaborators': [{'name': 'a', 'relation': 'pre'}, {'name': 'b', 'relation': 'pre'}]},
        {'owner': 'b', 'collaborators': [{'name': 'a', 'relation': 'pre'}]},
    ])
    for entry in bottleneck_ranking(items):
        assert len(entry.blocking) == entry.outbound_count, entry.name
        assert len(entry.waiters) == entry.inbound_count, entry.name

    a = next(b for b in bottleneck_ranking(items) if b.name == 'a')
    assert a.blocking == ['a', 'b']
    assert a.waiters == ['b']


def test_intensity_follows_inbound_order(team_items):
    ranking = bottleneck_ranking(team_items)
    for hi in ranking:
        for lo in ranking:
            if hi.inbound_count > lo.inbound_count:
                assert hi.intensity >= lo.intensity, (hi.name, lo.name)
        assert 0 <= hi.intensity <= 100
    assert max(b.intensity for b in ranking) == 100


def test_group_matrix_is_dense(team_items):
    cells = group_matrix(team_items)
    # backend, frontend, data and the owner with no group
    assert len(cells) == 16
    by_key = {(c.source_group, c.target_group): c for c in cells}

    bf = by_key[('backend', 'frontend')]
    assert (bf.pair_count, bf.wait_count, bf.total_count) == (1, 3, 4)
    assert by_key[('backend', 'backend')].pair_count == 3
    assert by_key[('frontend', 'data')].other_count == 1
    assert by_key[('data', 'backend')].total_count == 0
    # frank -> zed has no target group, skipped
    assert sum(c.total_count for c in cells if c.source_group == 'Unknown') == 0


def test_group_matrix_filters(team_items):
    def cell(filt, s, t):
        return next(c for c in group_matrix(team_items, filt) if (c.source_group, c.target_group) == (s, t))

    assert cell('pair', 'backend', 'frontend').total_count == 1
    assert cell('pre', 'backend', 'frontend').total_count == 3
    assert cell('post', 'frontend', 'data').total_count == 1
    assert cell('both', 'backend', 'frontend').total_count == 4
    with pytest.raises(ValueError):
        group_matrix(team_items, 'review')


def test_team_totals(team_items):
    totals = team_totals(team_items)
    assert totals.members == 6
    assert totals.total_pairs == 4
    assert totals.total_waits == 6
    assert totals.total_references == 11
    assert totals.avg_pair_count == pytest.approx(4 / 6)


def test_empty_input():
    assert pair_count_per_member([]) == {}
    assert wait_count_per_member([]) == {}
    assert inbound_wait_counts([]) == {}
    assert cross_group_score([], 'a') == 0
    assert cross_module_score([], 'a') == 0
    assert load_heatmap([]) == []
    assert bottleneck_ranking([]) == []
    assert group_matrix([]) == []
    assert member_summary([], 'a').total_collaborations == 0
    assert team_totals([]).avg_pair_count == 0


def test_members_that_only_collaborate_have_no_summary_counts():
    items = parse_items([{'owner': 'a', 'collaborators': [{'name': 'b', 'relation': 'pre'}]}])
    s = member_summary(items, 'b')
    assert (s.pair_count, s.wait_count, s.inbound_wait) == (0, 0, 1)
    assert s.total_collaborations == 1
