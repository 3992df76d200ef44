# turns raw weekly records into WorkItems. no analysis in here.
# storage is somebody else's problem, we only read what they hand us (or a json dump of it)

import json
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from collabgraph.relations import canonical_relation

logger = logging.getLogger(__name__)


class DataFormatError(ValueError):
    """top level of a data file is not something we understand"""


@dataclass(frozen=True)
class Collaborator:
    name: str
    relation: str


@dataclass(frozen=True)
class WorkItem:
    owner: str
    group: Optional[str] = None
    module: Optional[str] = None
    collaborators: Tuple[Collaborator, ...] = field(default_factory=tuple)
    title: Optional[str] = None

    def references(self) -> Iterator[Tuple[str, str]]:
        """
        (name, relation) for every usable collaborator entry.
        a broken entry is skipped, the rest of the item still counts
        """
        for collab in self.collaborators or ():
            name = getattr(collab, 'name', None)
            if not isinstance(name, str) or not name:
                continue
            yield name, canonical_relation(getattr(collab, 'relation', None))


@dataclass(frozen=True)
class WeekData:
    key: str
    label: str
    items: Tuple[WorkItem, ...]


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _member_name(value) -> Optional[str]:
    # names are ids, kept exactly as written. blank means missing
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def parse_collaborators(raw) -> Tuple[Collaborator, ...]:
    if not raw:
        return ()
    if not isinstance(raw, (list, tuple)):
        logger.warning("collaborators is not a list (%r), ignoring", type(raw).__name__)
        return ()

    out = []
    for entry in raw:
        if isinstance(entry, dict):
            name = _member_name(entry.get('name'))
            relation = entry.get('relation')
        elif isinstance(entry, (list, tuple)) and len(entry) == 2:
            name, relation = _member_name(entry[0]), entry[1]
        else:
            name, relation = None, None

        if not name:
            logger.warning("dropping malformed collaborator entry: %r", entry)
            continue
        out.append(Collaborator(name=name, relation=canonical_relation(relation)))
    return tuple(out)


def parse_item(record: dict) -> Optional[WorkItem]:
    # both our field names and the dashboard's legacy ones (name / domain)
    if not isinstance(record, dict):
        logger.warning("skipping non-dict item record: %r", record)
        return None

    owner = _member_name(record.get('owner', record.get('name')))
    if not owner:
        logger.warning("skipping item without owner: %r", record)
        return None

    return WorkItem(
        owner=owner,
        group=_clean(record.get('group', record.get('domain'))),
        module=_clean(record.get('module')),
        collaborators=parse_collaborators(record.get('collaborators')),
        title=_clean(record.get('title')),
    )


def parse_items(records) -> List[WorkItem]:
    items = []
    for record in records or []:
        item = parse_item(record)
        if item is not None:
            items.append(item)
    return items


class WorkItemLoader:

    def __init__(self, filepath: str):
        self.filepath = filepath
        self.items: List[WorkItem] = []
        self.weeks: List[WeekData] = []

    def load(self) -> List[WorkItem]:

        with open(self.filepath, 'r', encoding='utf-8') as f:
            payload = json.load(f)

        if isinstance(payload, list):
            self.items = parse_items(payload)
            self.weeks = []

        elif isinstance(payload, dict) and isinstance(payload.get('weeks'), list):
            self.weeks = []
            for i, week in enumerate(payload['weeks']):
                if not isinstance(week, dict):
                    logger.warning("skipping malformed week #%d in %s", i, self.filepath)
                    continue
                key = str(week.get('key', i))
                self.weeks.append(WeekData(
                    key=key,
                    label=str(week.get('label', key)),
                    items=tuple(parse_items(week.get('items'))),
                ))
            # most recent week is the current period
            self.items = list(self.weeks[-1].items) if self.weeks else []

        elif isinstance(payload, dict) and isinstance(payload.get('items'), list):
            self.items = parse_items(payload['items'])
            self.weeks = []

        else:
            raise DataFormatError(
                f"{self.filepath}: expected a list of items or an object with 'weeks' / 'items'"
            )

        logger.debug("loaded %d items (%d weeks) from %s", len(self.items), len(self.weeks), self.filepath)
        return self.items

    def previous_items(self) -> Optional[List[WorkItem]]:
        if len(self.weeks) < 2:
            return None
        return list(self.weeks[-2].items)
