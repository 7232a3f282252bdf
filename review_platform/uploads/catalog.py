"""Lookups over the small named catalogs owned by the catalog store.

Catalogs are passed in as fetched; nothing is cached here, so every caller
sees the store's current names.
"""

from collections.abc import Iterable

from review_platform.uploads.base import LookupValue
from review_platform.uploads.exceptions import NoSuchStatusError


def find_by_name(catalog: Iterable[LookupValue], name: str) -> LookupValue | None:
    """Return the first catalog entry called ``name``, or None."""
    for value in catalog:
        if value.name == name:
            return value
    return None


def require_by_name(
    catalog: Iterable[LookupValue],
    name: str,
    kind: str = "submission status",
) -> LookupValue:
    """Return the entry called ``name``, raising NoSuchStatusError if absent."""
    value = find_by_name(catalog, name)
    if value is None:
        raise NoSuchStatusError(name, kind)
    return value


def find_by_id(catalog: Iterable[LookupValue], value_id: int) -> LookupValue | None:
    """Return the entry with ``value_id``, or None."""
    for value in catalog:
        if value.id == value_id:
            return value
    return None


def ids_for_names(catalog: Iterable[LookupValue], names: Iterable[str]) -> list[int]:
    """Ids of every entry whose name is in ``names``, in catalog order.

    Names with no entry are dropped.
    """
    wanted = set(names)
    return [value.id for value in catalog if value.name in wanted]
