"""
Row aggregation

A one-to-many join returns one flat row per child. These helpers fold such
rows back into nested documents: rows are first partitioned by parent key,
then each partition becomes one document whose parent fields come from the
first row, whose ``many`` groups collect one child per row and whose
singleton groups (e.g. an address repeated on every order line) appear once.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

Row = Mapping[str, Any]
Fields = Union[Sequence[str], Mapping[str, str]]


def _as_mapping(fields: Fields) -> dict[str, str]:
    if isinstance(fields, Mapping):
        return dict(fields)
    return {name: name for name in fields}


@dataclass
class FieldGroup:
    """A nested group of columns.

    ``fields`` maps output names to row columns; a plain sequence keeps the
    column names. ``identity`` lists the row columns that tell whether the
    joined record exists at all; when every one of them is null the row
    carries no record for this group (an outer join miss).
    """
    name: str
    fields: Fields
    many: bool = False
    identity: Optional[Sequence[str]] = None
    columns: dict[str, str] = field(init=False, repr=False)

    def __post_init__(self):
        self.columns = _as_mapping(self.fields)
        if self.identity is None:
            self.identity = list(self.columns.values())

    def present(self, row: Row) -> bool:
        return any(row.get(col) is not None for col in self.identity)

    def extract(self, row: Row) -> dict[str, Any]:
        return {out: row.get(col) for out, col in self.columns.items()}


def group_rows(rows: Iterable[Row], key: str) -> dict[Any, list[Row]]:
    """Partition rows by ``row[key]``; parents keep first-appearance order."""
    groups: dict[Any, list[Row]] = {}
    for row in rows:
        groups.setdefault(row[key], []).append(row)
    return groups


def nest(rows: Sequence[Row], parent: Fields, groups: Sequence[FieldGroup] = ()) -> Optional[dict[str, Any]]:
    """Build one document from the rows of a single parent.

    Returns ``None`` when there are no rows, i.e. the parent does not exist.
    """
    if not rows:
        return None
    first = rows[0]
    doc = {out: first.get(col) for out, col in _as_mapping(parent).items()}
    for group in groups:
        if group.many:
            doc[group.name] = [group.extract(row) for row in rows if group.present(row)]
        else:
            found = next((row for row in rows if group.present(row)), None)
            doc[group.name] = group.extract(found) if found is not None else None
    return doc


def nest_many(rows: Iterable[Row], key: str, parent: Fields, groups: Sequence[FieldGroup] = ()) -> list[dict[str, Any]]:
    return [nest(part, parent, groups) for part in group_rows(rows, key).values()]
