"""
Filter Engine

Produces the visible subset of an admin list page from a working set of
records and the page's active predicates:

1. Status: "show only ignored" mode, an exact status, or the default view
   that hides Ignored records.
2. Category / department: exact match (department case-insensitively)
   unless "All".
3. Search: case-insensitive substring over the entity kind's text fields.

Predicates are conjunctive. The engine never re-sorts: records come back in
the order the record store returned them (newest first).
"""
from .records import IGNORED, field_value, where

ALL = 'All'


class FilterPredicates:
    """Active predicates of one admin list page."""

    def __init__(self, status=ALL, category=ALL, search_term='', include_ignored=False):
        self.status = status or ALL
        self.category = category or ALL
        self.search_term = (search_term or '').strip()
        self.include_ignored = bool(include_ignored)

    def __repr__(self):
        return (
            f"FilterPredicates(status={self.status!r}, category={self.category!r}, "
            f"search_term={self.search_term!r}, include_ignored={self.include_ignored!r})"
        )

    def __eq__(self, other):
        if not isinstance(other, FilterPredicates):
            return NotImplemented
        return vars(self) == vars(other)

    @classmethod
    def from_query_params(cls, params, category_param='category'):
        """
        Build predicates from request query parameters.

        Recognised parameters: status, <category_param>, search, show_ignored.
        """
        show_ignored = str(params.get('show_ignored', '')).lower() in ('1', 'true', 'yes', 'on')
        return cls(
            status=params.get('status', ALL),
            category=params.get(category_param, ALL),
            search_term=params.get('search', ''),
            include_ignored=show_ignored,
        )

    @property
    def only_ignored(self):
        return self.include_ignored and self.status == ALL


def matches_status(record, kind, predicates):
    if not kind.has_status:
        return True

    status = field_value(record, 'status')

    if predicates.only_ignored:
        return status == IGNORED
    if predicates.status != ALL:
        return status is not None and status == predicates.status
    if kind.has_ignored_state:
        return status is not None and status != IGNORED
    return True


def matches_category(record, kind, predicates):
    if predicates.category == ALL or not kind.category_field:
        return True

    value = field_value(record, kind.category_field)
    if value is None:
        return False
    if kind.category_case_insensitive:
        return str(value).lower() == predicates.category.lower()
    return value == predicates.category


def matches_search(record, kind, predicates):
    term = predicates.search_term.lower()
    if not term:
        return True

    for field in kind.search_fields:
        value = field_value(record, field)
        if value is not None and term in str(value).lower():
            return True
    return False


def matches(record, kind, predicates):
    return (
        matches_status(record, kind, predicates)
        and matches_category(record, kind, predicates)
        and matches_search(record, kind, predicates)
    )


def filter_records(records, kind, predicates):
    """
    Apply every predicate to a sequence of records.

    Stable and idempotent: the result keeps input order, and filtering the
    result again with the same predicates returns it unchanged.
    """
    return [record for record in records if matches(record, kind, predicates)]


def server_predicates(kind, predicates):
    """
    Predicates the record store can evaluate, as `where` tuples.

    Status is pushed down for kinds with an Ignored state; category only for
    kinds whose category comparison is exact.
    """
    pushed = []

    if kind.has_ignored_state:
        if predicates.only_ignored:
            pushed.append(where('status', '==', IGNORED))
        elif predicates.status != ALL:
            pushed.append(where('status', '==', predicates.status))
        else:
            pushed.append(where('status', '!=', IGNORED))

    if kind.category_pushdown and predicates.category != ALL:
        pushed.append(where(kind.category_field, '==', predicates.category))

    return pushed


def run_filter(store, kind, predicates, limit=None):
    """
    Query the store with the pushed-down predicates, newest first, and apply
    the full predicate set to the result.
    """
    records = store.query(
        kind.collection,
        predicates=server_predicates(kind, predicates),
        order_by=kind.timestamp_field,
        direction='desc',
        limit=limit,
    )
    return filter_records(records, kind, predicates)
