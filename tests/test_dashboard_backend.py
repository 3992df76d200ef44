import pytest

from dashboard.data_backend import DashboardData


@pytest.fixture
def team_data(team_items):
    return DashboardData().set_items(team_items)


def test_load_weeks_file(weeks_file):
    data = DashboardData().load(weeks_file)
    assert len(data.items) == 4
    assert len(data.previous_items) == 2
    assert len(data.weeks) == 4
    assert data.members() == ['alice', 'carol', 'bob', 'dave']

    timeline = data.get_timeline('carol')
    assert timeline[-1].is_anomaly
    assert 'bottleneck_up' in [i.code for i in data.get_insights('carol')]


def test_previous_file_overrides_weeks(weeks_file, team_file):
    data = DashboardData().load(weeks_file, previous_path=team_file)
    assert len(data.previous_items) == 7
    assert data.get_previous_member('alice').pair_count == 3


def test_team_stats(team_data):
    stats = team_data.get_full_graph_stats()
    assert stats['num_members'] == 7
    assert stats['num_owners'] == 6
    assert stats['num_edges'] == 9
    assert stats['num_references'] == 11
    assert stats['total_waits'] == 6
    assert stats['max_degree'] == 7
    assert stats['num_components'] == 2
    assert stats['density'] == pytest.approx(9 / 42)


def test_components_and_centralities(team_data):
    comps = team_data.get_components()
    assert [c['size'] for c in comps] == [5, 2]
    assert comps[1]['members'] == ['frank', 'zed']

    cents = team_data.get_centralities()
    assert set(cents) == set(team_data.members())
    assert cents['carol']['betweenness'] > 0
    assert cents['erin']['betweenness'] == 0
    assert team_data.get_centralities() is cents


def test_tables(team_data):
    load = team_data.load_table()
    assert len(load) == 6
    assert list(load.columns[:2]) == ['member', 'group']
    assert list(load.columns[-2:]) == ['inbound_wait', 'total_load']
    assert load.iloc[0]['member'] == 'alice'
    assert load.iloc[0]['pair'] == 3

    bottlenecks = team_data.bottleneck_table()
    assert bottlenecks.iloc[0]['member'] == 'carol'
    assert bottlenecks.iloc[0]['intensity'] == 100

    matrix = team_data.matrix_table()
    assert matrix.shape == (4, 4)
    assert matrix.loc['backend', 'frontend'] == 4
    assert team_data.matrix_table('pre').loc['backend', 'frontend'] == 3

    assert list(team_data.insights_table()['code']) == ['team_bottleneck', 'team_active_pairer']
    assert list(team_data.insights_table('erin')['code']) == ['no_collaboration']


def test_search(team_data):
    assert team_data.search_members('A') == ['alice', 'carol', 'dave', 'frank']
    assert team_data.search_members('a', limit=2) == ['alice', 'carol']


def test_member_summaries_are_cached(team_data):
    assert team_data.get_member('alice') is team_data.get_member('alice')


def test_scene_is_reused_across_reloads(team_items):
    data = DashboardData().set_items(team_items)
    scene = data.get_scene()
    assert data.get_scene() is scene

    data.set_items(list(team_items))
    assert data.get_scene() is scene
    assert data.simulator.relax_count == 1

    data.set_items(team_items[:3])
    assert data.simulator.relax_count == 2
    assert scene.graph is data.graph


def test_orbit(team_data):
    view = team_data.get_orbit('alice')
    assert {n.name for n in view.layout.nodes} == {'bob', 'carol', 'dave'}


def test_cache_round_trip(team_data, tmp_path):
    path = str(tmp_path / 'cache.pkl')
    team_data.save_cache(path)

    restored = DashboardData()
    assert restored.load_cache(path)
    assert restored.members() == team_data.members()
    assert restored.get_full_graph_stats() == team_data.get_full_graph_stats()

    assert not DashboardData().load_cache(str(tmp_path / 'missing.pkl'))


def test_empty_data():
    data = DashboardData().set_items([])
    stats = data.get_full_graph_stats()
    assert stats['num_members'] == 0
    assert stats['density'] == 0.0
    assert stats['num_components'] == 0
    assert data.load_table().empty
    assert data.bottleneck_table().empty
    assert data.matrix_table().empty
    assert data.get_relation_stats() == {}
    assert data.get_weekly_trend() == []
