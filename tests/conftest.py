"""
shared fixtures.

team_records is small enough to count by hand:

  alice (backend, api)   pair bob, pre carol, pair dave
  alice (backend, auth)  pair bob, pre carol
  bob   (backend, api)   pair alice, pre carol
  carol (frontend, ui)   post erin
  dave  (frontend, ui)   pre carol, waiting-on alice
  erin  (data, etl)      -
  frank (no group, etl)  pre zed        zed never owns an item
"""

import json

import pytest

from collabgraph.data_loader import WeekData, parse_items


def item(owner, group=None, module=None, *collabs):
    record = {'owner': owner, 'collaborators': [{'name': n, 'relation': r} for n, r in collabs]}
    if group:
        record['group'] = group
    if module:
        record['module'] = module
    return record


TEAM_RECORDS = [
    item('alice', 'backend', 'api', ('bob', 'pair'), ('carol', 'pre'), ('dave', 'pair')),
    item('alice', 'backend', 'auth', ('bob', 'pair'), ('carol', 'pre')),
    item('bob', 'backend', 'api', ('alice', 'pair'), ('carol', 'pre')),
    item('carol', 'frontend', 'ui', ('erin', 'post')),
    item('dave', 'frontend', 'ui', ('carol', 'pre'), ('alice', 'waiting-on')),
    item('erin', 'data', 'etl'),
    item('frank', None, 'etl', ('zed', 'pre')),
]

# three quiet weeks, then carol gets swamped
QUIET_WEEK = [
    item('alice', 'backend', None, ('carol', 'pre')),
    item('carol', 'frontend', None, ('alice', 'pair')),
]
BUSY_WEEK = [
    item('alice', 'backend', None, ('carol', 'pre'), ('carol', 'pre')),
    item('bob', 'backend', None, ('carol', 'pre')),
    item('dave', 'frontend', None, ('carol', 'pre'), ('carol', 'pre')),
    item('carol', 'frontend', None, ('alice', 'pair'), ('bob', 'pre')),
]
WEEK_RECORDS = [
    {'key': 'w1', 'label': 'Week 1', 'items': QUIET_WEEK},
    {'key': 'w2', 'label': 'Week 2', 'items': QUIET_WEEK},
    {'key': 'w3', 'label': 'Week 3', 'items': QUIET_WEEK},
    {'key': 'w4', 'label': 'Week 4', 'items': BUSY_WEEK},
]


@pytest.fixture
def spec_items():
    # A (X) pairs with B, B (Y) pairs with A and waits on C, C (Y) alone
    return parse_items([
        item('A', 'X', None, ('B', 'pair')),
        item('B', 'Y', None, ('A', 'pair'), ('C', 'wait')),
        item('C', 'Y'),
    ])


@pytest.fixture
def team_items():
    return parse_items(TEAM_RECORDS)


@pytest.fixture
def previous_team_items():
    return parse_items([item('alice', 'backend', 'api', ('bob', 'pair'))])


@pytest.fixture
def weeks():
    return [
        WeekData(key=w['key'], label=w['label'], items=tuple(parse_items(w['items'])))
        for w in WEEK_RECORDS
    ]


@pytest.fixture
def weeks_file(tmp_path):
    path = tmp_path / 'weeks.json'
    path.write_text(json.dumps({'weeks': WEEK_RECORDS}), encoding='utf-8')
    return str(path)


@pytest.fixture
def team_file(tmp_path):
    path = tmp_path / 'team.json'
    path.write_text(json.dumps(TEAM_RECORDS), encoding='utf-8')
    return str(path)
