"""
Attribute resolution.

Several views may declare an attribute with the same name. For each name the
resolver keeps the minimal, deterministically ordered set of (owner, value
type) candidates that the dispatcher has to test.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from ...core.logging import get_logger
from ...models.descriptor import AttrModel, ViewModel

logger = get_logger(__name__)


def _sort_key(attr: AttrModel) -> tuple:
    return *attr.type.sort_key, attr.owner.name


def dominates(winner: AttrModel, loser: AttrModel) -> bool:
    """True when ``loser`` is shadowed by the more specific ``winner``.

    Only identical value types are compared; a merely compatible value type
    does not shadow anything.
    """
    return (
        winner is not loser
        and winner.type == loser.type
        and loser.owner.is_assignable_from(winner.owner)
    )


def _drop_duplicates(candidates: list[AttrModel]) -> list[AttrModel]:
    unique: list[AttrModel] = []
    for attr in candidates:
        if any(kept.owner is attr.owner and kept.type == attr.type for kept in unique):
            continue
        unique.append(attr)
    return unique


def filter_candidates(candidates: Iterable[AttrModel]) -> list[AttrModel]:
    """Sort candidates of one attribute name and drop the dominated ones."""
    ordered = _drop_duplicates(sorted(candidates, key=_sort_key))
    return [a for a in ordered if not any(dominates(b, a) for b in ordered)]


def resolve_attributes(views: Iterable[ViewModel]) -> dict[str, list[AttrModel]]:
    """Group the attributes of ``views`` by name and filter each group.

    Views must belong to a finalized graph. Names come out sorted.
    """
    grouped: dict[str, list[AttrModel]] = defaultdict(list)
    for view in views:
        for attr in view.attrs:
            grouped[attr.name].append(attr)

    resolved: dict[str, list[AttrModel]] = {}
    dropped = 0
    for name in sorted(grouped):
        candidates = grouped[name]
        resolved[name] = filter_candidates(candidates)
        dropped += len(candidates) - len(resolved[name])

    logger.debug("Attributes resolved", names=len(resolved), dropped=dropped)
    return resolved
