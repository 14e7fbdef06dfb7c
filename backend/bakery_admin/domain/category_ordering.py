"""Sort-key assignment for drag-and-drop category reordering.

Categories carry an optional numeric ``sort`` key. A drag moves one category
inside the currently filtered scope; the moved category gets a key between its
new neighbours, and when no gap is left every category in the scope is
renumbered with a stride of 10. Categories outside the scope keep their keys.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from functools import cmp_to_key
from typing import Any, Iterable, Optional, Union

SortValue = Union[int, float]

RENUMBER_STRIDE = 10
FRONT_DEFAULT_SORT = 10
FRONT_OFFSET = 5
BACK_OFFSET = 10
MIDDLE_FALLBACK_GAP = 20

TOP_LEVEL_FILTER_VALUE = "null"


def _parse_sort(value: Any) -> Optional[SortValue]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            number = float(raw)
        except ValueError:
            return None
        return int(number) if number.is_integer() else number
    return None


def _parse_optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Category:
    id: int
    name: str = ""
    parent_id: Optional[int] = None
    level: int = 1
    status: str = "active"
    sort: Optional[SortValue] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    extra: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, payload: dict) -> "Category":
        known = {
            "id",
            "name",
            "parent_id",
            "parentId",
            "level",
            "status",
            "sort",
            "created_at",
            "updated_at",
        }
        parent_raw = payload.get("parent_id", payload.get("parentId"))
        level = _parse_optional_int(payload.get("level"))
        parent_id = _parse_optional_int(parent_raw)
        return cls(
            id=int(payload["id"]),
            name=str(payload.get("name") or ""),
            parent_id=parent_id,
            level=level if level is not None else (1 if parent_id is None else 2),
            status=str(payload.get("status") or "active"),
            sort=_parse_sort(payload.get("sort")),
            created_at=payload.get("created_at"),
            updated_at=payload.get("updated_at"),
            extra={k: v for k, v in payload.items() if k not in known},
        )

    def to_dict(self) -> dict:
        return {
            **self.extra,
            "id": self.id,
            "name": self.name,
            "parent_id": self.parent_id,
            "level": self.level,
            "status": self.status,
            "sort": self.sort,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def compare_categories(a: Category, b: Category) -> int:
    if a.sort is not None and b.sort is not None:
        if a.sort != b.sort:
            return -1 if a.sort < b.sort else 1
        return (a.id > b.id) - (a.id < b.id)
    if a.sort is not None:
        return -1
    if b.sort is not None:
        return 1
    return (a.id > b.id) - (a.id < b.id)


category_sort_key = cmp_to_key(compare_categories)


def sort_categories(categories: Iterable[Category]) -> list[Category]:
    return sorted(categories, key=category_sort_key)


@dataclass(frozen=True)
class ParentFilter:
    """Which categories a reorder view shows.

    No parent id and ``top_level`` False means every category.
    """

    parent_id: Optional[int] = None
    top_level: bool = False

    @classmethod
    def parse(cls, raw: Any) -> "ParentFilter":
        if raw is None:
            return cls()
        if isinstance(raw, bool):
            raise ValueError("無效的父分類篩選")
        if isinstance(raw, int):
            return cls(parent_id=raw)
        value = str(raw).strip()
        if value in ("", "all"):
            return cls()
        if value == TOP_LEVEL_FILTER_VALUE:
            return cls(top_level=True)
        try:
            return cls(parent_id=int(value))
        except ValueError as exc:
            raise ValueError("無效的父分類篩選") from exc

    @property
    def is_all(self) -> bool:
        return not self.top_level and self.parent_id is None

    def matches(self, category: Category) -> bool:
        if self.top_level:
            return category.parent_id is None
        if self.parent_id is not None:
            return category.parent_id == self.parent_id
        return True

    def to_query_value(self) -> str:
        if self.top_level:
            return TOP_LEVEL_FILTER_VALUE
        if self.parent_id is not None:
            return str(self.parent_id)
        return ""


def view(categories: Iterable[Category], parent_filter: ParentFilter) -> list[Category]:
    return sort_categories(c for c in categories if parent_filter.matches(c))


@dataclass(frozen=True)
class MovePlan:
    old_index: int
    new_index: int

    @property
    def moving_down(self) -> bool:
        return self.old_index < self.new_index


@dataclass(frozen=True)
class KeyAssignment:
    new_sort: SortValue
    prev_sort: Optional[SortValue]
    next_sort: Optional[SortValue]


@dataclass
class ReorderResult:
    categories: list[Category]
    moved_id: int
    new_sort: SortValue
    renumbered: bool


def _index_of(scope: list[Category], category_id: int) -> int:
    for index, category in enumerate(scope):
        if category.id == category_id:
            return index
    return -1


def resolve_positions(
    scope: list[Category], active_id: int, over_id: int
) -> Optional[MovePlan]:
    if active_id == over_id:
        return None
    old_index = _index_of(scope, active_id)
    new_index = _index_of(scope, over_id)
    if old_index < 0 or new_index < 0:
        return None
    return MovePlan(old_index=old_index, new_index=new_index)


def assign_sort_key(scope: list[Category], plan: MovePlan) -> KeyAssignment:
    """Compute the moved category's key from the not-yet-spliced scope.

    The moved category still sits at ``plan.old_index``, so the bounding pair
    for a middle drop depends on the drag direction.
    """
    new_index = plan.new_index
    if new_index == 0:
        first_sort = scope[0].sort or FRONT_DEFAULT_SORT
        return KeyAssignment(
            new_sort=first_sort - FRONT_OFFSET,
            prev_sort=None,
            next_sort=first_sort,
        )

    if new_index == len(scope) - 1:
        last_sort = scope[-1].sort or 0
        return KeyAssignment(
            new_sort=last_sort + BACK_OFFSET,
            prev_sort=last_sort,
            next_sort=None,
        )

    if plan.moving_down:
        prev_item, next_item = scope[new_index], scope[new_index + 1]
    else:
        prev_item, next_item = scope[new_index - 1], scope[new_index]
    prev_sort = prev_item.sort or 0
    next_sort = next_item.sort or (prev_sort + MIDDLE_FALLBACK_GAP)
    return KeyAssignment(
        new_sort=math.floor((prev_sort + next_sort) / 2),
        prev_sort=prev_sort,
        next_sort=next_sort,
    )


def has_collision(
    scope: list[Category], plan: MovePlan, assignment: KeyAssignment
) -> bool:
    new_sort = assignment.new_sort
    prev_sort, next_sort = assignment.prev_sort, assignment.next_sort
    if new_sort == prev_sort or new_sort == next_sort:
        return True
    # fractional keys can floor outside the bounding pair
    if prev_sort is not None and new_sort < prev_sort:
        return True
    if next_sort is not None and new_sort > next_sort:
        return True
    moved_id = scope[plan.old_index].id
    return any(c.id != moved_id and c.sort == new_sort for c in scope)


def renumber(scope: list[Category], plan: MovePlan) -> list[Category]:
    reordered = list(scope)
    moved = reordered.pop(plan.old_index)
    insert_at = plan.new_index - 1 if plan.new_index > plan.old_index else plan.new_index
    reordered.insert(insert_at, moved)
    return [
        replace(category, sort=(position + 1) * RENUMBER_STRIDE)
        for position, category in enumerate(reordered)
    ]


def _merge(categories: list[Category], updated: Iterable[Category]) -> list[Category]:
    by_id = {c.id: c for c in updated}
    return [by_id.get(c.id, c) for c in categories]


def apply_move(
    categories: list[Category],
    parent_filter: ParentFilter,
    active_id: int,
    over_id: int,
) -> Optional[ReorderResult]:
    """Move ``active_id`` onto ``over_id`` inside the filtered scope.

    Returns None when nothing changes. The returned list keeps the input
    order; only the moved category, or the whole scope on renumbering,
    carries new keys.
    """
    scope = view(categories, parent_filter)
    plan = resolve_positions(scope, active_id, over_id)
    if plan is None:
        return None

    assignment = assign_sort_key(scope, plan)
    if has_collision(scope, plan, assignment):
        renumbered_scope = renumber(scope, plan)
        moved = next(c for c in renumbered_scope if c.id == active_id)
        return ReorderResult(
            categories=_merge(categories, renumbered_scope),
            moved_id=active_id,
            new_sort=moved.sort,
            renumbered=True,
        )

    moved = replace(scope[plan.old_index], sort=assignment.new_sort)
    return ReorderResult(
        categories=_merge(categories, [moved]),
        moved_id=active_id,
        new_sort=assignment.new_sort,
        renumbered=False,
    )


def build_sort_payload(categories: Iterable[Category]) -> list[dict]:
    return [{"id": c.id, "sort": c.sort or 0} for c in categories]
