"""Search filters for resource and submission lookups.

Filters form a small expression tree. In-memory stores evaluate them with
``matches``; SQL-backed stores render them with ``to_clause``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, and_, or_

from review_platform.uploads.exceptions import SearchQueryError


class Filter(ABC):
    """A predicate over store entities."""

    @abstractmethod
    def matches(self, entity: Any) -> bool:
        """Evaluate the filter against an in-memory entity."""

    def to_clause(self, model: type) -> ColumnElement[bool]:
        """Render the filter as a SQLAlchemy clause over ``model``."""
        raise SearchQueryError(
            f"{type(self).__name__} cannot be rendered as SQL",
            {"model": getattr(model, "__tablename__", model.__name__)},
        )


class EqualToFilter(Filter):
    """``entity.<attribute> == value``."""

    def __init__(self, attribute: str, value: Any) -> None:
        if not attribute:
            raise SearchQueryError("Filter attribute must not be empty")
        self.attribute = attribute
        self.value = value

    def matches(self, entity: Any) -> bool:
        return getattr(entity, self.attribute, None) == self.value

    def to_clause(self, model: type) -> ColumnElement[bool]:
        column = getattr(model, self.attribute, None)
        if column is None:
            raise SearchQueryError(
                f"Unknown search attribute '{self.attribute}'",
                {"model": getattr(model, "__tablename__", model.__name__)},
            )
        return column == self.value

    def __repr__(self) -> str:
        return f"EqualToFilter({self.attribute!r}, {self.value!r})"


class _CompositeFilter(Filter):
    def __init__(self, filters: Sequence[Filter]) -> None:
        if not filters:
            raise SearchQueryError(f"{type(self).__name__} needs at least one filter")
        self.filters = list(filters)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.filters!r})"


class AndFilter(_CompositeFilter):
    """All sub-filters must match."""

    def matches(self, entity: Any) -> bool:
        return all(f.matches(entity) for f in self.filters)

    def to_clause(self, model: type) -> ColumnElement[bool]:
        return and_(*(f.to_clause(model) for f in self.filters))


class OrFilter(_CompositeFilter):
    """At least one sub-filter must match."""

    def matches(self, entity: Any) -> bool:
        return any(f.matches(entity) for f in self.filters)

    def to_clause(self, model: type) -> ColumnElement[bool]:
        return or_(*(f.to_clause(model) for f in self.filters))


class ExtensionPropertyNameFilter(Filter):
    """The entity carries an extension property called ``name``."""

    def __init__(self, name: str) -> None:
        self.name = name

    def matches(self, entity: Any) -> bool:
        return self.name in getattr(entity, "extension_properties", {})

    def __repr__(self) -> str:
        return f"ExtensionPropertyNameFilter({self.name!r})"


class ExtensionPropertyValueFilter(Filter):
    """The extension property called ``name`` has the string value ``value``."""

    def __init__(self, name: str, value: str) -> None:
        self.name = name
        self.value = value

    def matches(self, entity: Any) -> bool:
        return getattr(entity, "extension_properties", {}).get(self.name) == self.value

    def __repr__(self) -> str:
        return f"ExtensionPropertyValueFilter({self.name!r}, {self.value!r})"


# ===========================================
# FILTER BUILDERS
# ===========================================


def resource_role_filter(role_ids: Sequence[int]) -> Filter:
    """Match resources holding any of ``role_ids``."""
    return OrFilter([EqualToFilter("role_id", role_id) for role_id in role_ids])


def project_filter(project_id: int) -> Filter:
    return EqualToFilter("project_id", project_id)


def acting_resource_filter(
    role_ids: Sequence[int],
    project_id: int,
    reference_property: str,
    user_id: int,
) -> Filter:
    """Match the resource a user acts through on a project.

    The user id is compared as the string value of the ``reference_property``
    extension property, since resources have no user id field of their own.
    Both property conditions apply to that one property.
    """
    return AndFilter(
        [
            resource_role_filter(role_ids),
            project_filter(project_id),
            ExtensionPropertyNameFilter(reference_property),
            ExtensionPropertyValueFilter(reference_property, str(user_id)),
        ]
    )


def submission_resource_filter(resource_id: int) -> Filter:
    """Match submissions owned by ``resource_id``."""
    return EqualToFilter("resource_id", resource_id)
