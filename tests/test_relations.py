import pytest

from collabgraph import relations
from collabgraph.constants import RELATION_COLORS, RELATION_LABELS, UNKNOWN_RELATION
from collabgraph.relations import (
    canonical_relation, get_relation, is_pair, is_registered, is_wait,
    register_relation, registered_relations, relation_color, relation_label,
)


@pytest.fixture
def scratch_registry(monkeypatch):
    # registrations inside a test must not leak into the others
    monkeypatch.setattr(relations, '_REGISTRY', dict(relations._REGISTRY))
    monkeypatch.setattr(relations, '_ALIASES', dict(relations._ALIASES))


def test_default_kinds_are_registered():
    for name in ('pair', 'pre', 'post', 'review', 'handoff'):
        assert is_registered(name)
    assert registered_relations()[:2] == ['pair', 'pre']


def test_waiting_on_is_an_alias_of_pre():
    assert canonical_relation('waiting-on') == 'pre'
    assert 'waiting-on' in get_relation('pre').aliases
    assert is_wait(canonical_relation('waiting-on'))


def test_plain_wait_is_an_alias_of_pre():
    assert canonical_relation('wait') == 'pre'
    assert canonical_relation(' wait ') == 'pre'
    assert 'wait' in get_relation('pre').aliases


def test_canonical_relation_edge_cases():
    assert canonical_relation(' pair ') == 'pair'
    assert canonical_relation(None) == UNKNOWN_RELATION
    assert canonical_relation('') == UNKNOWN_RELATION
    assert canonical_relation(42) == UNKNOWN_RELATION
    # unknown strings pass through untouched, no guessing
    assert canonical_relation('blocked-by') == 'blocked-by'


def test_only_pair_and_wait_are_special():
    assert get_relation('pair').is_special
    assert get_relation('pre').is_special
    assert not get_relation('post').is_special
    assert is_pair('pair') and not is_pair('pre')
    assert not is_wait('post')


def test_labels_and_colors():
    assert relation_label('pre') == RELATION_LABELS['pre']
    assert relation_color('pair') == RELATION_COLORS['pair']
    assert relation_label('mystery') == 'mystery'
    assert relation_color('mystery') == RELATION_COLORS[UNKNOWN_RELATION]


def test_register_new_kind(scratch_registry):
    kind = register_relation('blocked-by', aliases=('blocked', ' '))
    assert kind.label == 'Blocked-By'
    assert kind.aliases == ('blocked',)
    assert canonical_relation('blocked') == 'blocked-by'
    # a new kind never picks up wait semantics
    assert not is_wait('blocked-by')
    assert not kind.is_special


def test_register_rejects_blank_name(scratch_registry):
    with pytest.raises(ValueError):
        register_relation('   ')
