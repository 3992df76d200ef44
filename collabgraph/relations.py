"""
relation vocabulary as an open registry.

pair and pre (wait) are the only kinds with special meaning; anything else,
registered or not, is just counted.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from collabgraph.constants import (
    HANDOFF, PAIR, POST, RELATION_ALIASES, RELATION_COLORS, RELATION_LABELS,
    REVIEW, SPECIAL_RELATIONS, UNKNOWN_RELATION, WAIT,
)


@dataclass(frozen=True)
class RelationKind:
    name: str
    label: str
    color: str
    aliases: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_special(self) -> bool:
        return self.name in SPECIAL_RELATIONS


_REGISTRY: Dict[str, RelationKind] = {}
_ALIASES: Dict[str, str] = {}


def register_relation(
    name: str,
    label: Optional[str] = None,
    color: Optional[str] = None,
    aliases: Iterable[str] = (),
) -> RelationKind:
    """
    add (or replace) a relation kind. new kinds never get pair/wait semantics,
    that only depends on the name.
    """
    name = name.strip()
    if not name:
        raise ValueError("relation name must be a non-empty string")

    aliases = tuple(a.strip() for a in aliases if a and a.strip())
    kind = RelationKind(
        name=name,
        label=label or name.title(),
        color=color or RELATION_COLORS[UNKNOWN_RELATION],
        aliases=aliases,
    )
    _REGISTRY[name] = kind
    for alias in aliases:
        _ALIASES[alias] = name
    return kind


def canonical_relation(raw) -> str:
    # missing -> sentinel, alias -> canonical, anything else passes through
    if raw is None or not isinstance(raw, str):
        return UNKNOWN_RELATION
    rel = raw.strip()
    if not rel:
        return UNKNOWN_RELATION
    return _ALIASES.get(rel, rel)


def get_relation(name: str) -> Optional[RelationKind]:
    return _REGISTRY.get(name)


def is_registered(name: str) -> bool:
    return name in _REGISTRY


def registered_relations() -> List[str]:
    return list(_REGISTRY)


def relation_label(name: str) -> str:
    kind = _REGISTRY.get(name)
    return kind.label if kind else name


def relation_color(name: str) -> str:
    kind = _REGISTRY.get(name)
    return kind.color if kind else RELATION_COLORS[UNKNOWN_RELATION]


def is_pair(relation: str) -> bool:
    return relation == PAIR


def is_wait(relation: str) -> bool:
    return relation == WAIT


def _register_defaults():
    aliases_for = {}
    for alias, target in RELATION_ALIASES.items():
        aliases_for.setdefault(target, []).append(alias)

    for name in (PAIR, WAIT, POST, REVIEW, HANDOFF):
        register_relation(
            name,
            label=RELATION_LABELS[name],
            color=RELATION_COLORS[name],
            aliases=aliases_for.get(name, ()),
        )


_register_defaults()
