"""
Record Store

Collection-addressed access to the site's records. Admin pages address
records the same way regardless of entity kind: a collection name, a list
of predicates, one ordering field and an optional limit.

Collections:
- contacts       -> contact.ContactMessage
- jobApplicants  -> careers.JobApplicant
- jobs           -> careers.JobListing
"""
import logging

from django.apps import apps
from django.core.exceptions import ValidationError
from django.db import DatabaseError

from .exceptions import PersistenceFailure, RecordNotFound

logger = logging.getLogger(__name__)

IGNORED = 'Ignored'


class EntityKind:
    """
    Describes one kind of record: where it lives and which of its fields
    the filter engine and workflows look at.

    Field values are read through `field_value`, so records may be model
    instances or plain dicts with absent keys.
    """

    def __init__(self, name, collection, model_label, statuses=(), default_status=None,
                 category_field=None, category_case_insensitive=False,
                 category_pushdown=False, search_fields=(), timestamp_field='timestamp'):
        self.name = name
        self.collection = collection
        self.model_label = model_label
        self.statuses = tuple(statuses)
        self.default_status = default_status
        self.category_field = category_field
        self.category_case_insensitive = category_case_insensitive
        self.category_pushdown = category_pushdown
        self.search_fields = tuple(search_fields)
        self.timestamp_field = timestamp_field

    def __repr__(self):
        return f"<EntityKind {self.name} ({self.collection})>"

    @property
    def model(self):
        return apps.get_model(self.model_label)

    @property
    def has_status(self):
        return bool(self.statuses)

    @property
    def has_ignored_state(self):
        return IGNORED in self.statuses


CONTACT = EntityKind(
    name='contact',
    collection='contacts',
    model_label='contact.ContactMessage',
    statuses=('New', 'Replied', 'Ignored'),
    default_status='New',
    category_field='category',
    category_pushdown=True,
    search_fields=('name', 'email', 'subject', 'message'),
)

APPLICANT = EntityKind(
    name='applicant',
    collection='jobApplicants',
    model_label='careers.JobApplicant',
    statuses=('Pending', 'Accepted', 'Rejected'),
    default_status='Pending',
    category_field='department_applied',
    category_case_insensitive=True,
    search_fields=('first_name', 'last_name', 'email', 'job_title_applied'),
)

JOB = EntityKind(
    name='job',
    collection='jobs',
    model_label='careers.JobListing',
    category_field='department',
    category_case_insensitive=True,
    search_fields=('title', 'location', 'department', 'description'),
)

KINDS = {kind.collection: kind for kind in (CONTACT, APPLICANT, JOB)}


def field_value(record, name, default=None):
    """
    Read a field from a model instance or a dict.

    Absent keys, absent attributes and None all come back as `default`.
    """
    if isinstance(record, dict):
        value = record.get(name, default)
    else:
        value = getattr(record, name, default)
    return default if value is None else value


def where(field, op, value):
    """Build a store predicate, e.g. where('status', '!=', 'Ignored')."""
    if op not in RecordStore.OPERATORS:
        raise ValueError(f"Unsupported predicate operator: {op}")
    return (field, op, value)


class RecordStore:
    """
    Collection-addressed access backed by the Django ORM.

    Every call is a blocking suspend point for the calling handler. Database
    errors surface as PersistenceFailure; unknown ids as RecordNotFound.
    """

    OPERATORS = ('==', '!=', '<', '<=', '>', '>=')

    LOOKUPS = {
        '<': 'lt',
        '<=': 'lte',
        '>': 'gt',
        '>=': 'gte',
    }

    def kind_for(self, collection):
        try:
            return KINDS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}")

    def model_for(self, collection):
        return self.kind_for(collection).model

    def _apply_predicates(self, queryset, predicates):
        for field, op, value in predicates:
            if op == '==':
                queryset = queryset.filter(**{field: value})
            elif op == '!=':
                # Absent values never satisfy an inequality
                queryset = queryset.exclude(**{field: value}).exclude(**{f'{field}__isnull': True})
            else:
                queryset = queryset.filter(**{f'{field}__{self.LOOKUPS[op]}': value})
        return queryset

    def query(self, collection, predicates=(), order_by='timestamp', direction='desc', limit=None):
        """
        Run a query against a collection.

        Args:
            collection: Collection name ('contacts', 'jobApplicants', 'jobs')
            predicates: Iterable of (field, op, value) tuples, see `where`
            order_by: Field to order by
            direction: 'asc' or 'desc'
            limit: Optional maximum number of records

        Returns:
            list: Matching model instances in store order
        """
        model = self.model_for(collection)
        queryset = self._apply_predicates(model.objects.all(), predicates)
        if order_by:
            queryset = queryset.order_by(f'-{order_by}' if direction == 'desc' else order_by)
        if limit is not None:
            queryset = queryset[:limit]

        try:
            return list(queryset)
        except DatabaseError as e:
            logger.error(f"Query on '{collection}' failed: {e}")
            raise PersistenceFailure(str(e)) from e

    def count(self, collection, predicates=()):
        model = self.model_for(collection)
        try:
            return self._apply_predicates(model.objects.all(), predicates).count()
        except DatabaseError as e:
            logger.error(f"Count on '{collection}' failed: {e}")
            raise PersistenceFailure(str(e)) from e

    def get(self, collection, record_id):
        model = self.model_for(collection)
        try:
            return model.objects.get(pk=record_id)
        except (model.DoesNotExist, ValidationError, ValueError):
            raise RecordNotFound(collection, record_id)
        except DatabaseError as e:
            logger.error(f"Fetching {record_id} from '{collection}' failed: {e}")
            raise PersistenceFailure(str(e)) from e

    def create(self, collection, **fields):
        model = self.model_for(collection)
        try:
            return model.objects.create(**fields)
        except DatabaseError as e:
            logger.error(f"Creating record in '{collection}' failed: {e}")
            raise PersistenceFailure(str(e)) from e

    def update(self, collection, record_id, **fields):
        """Write a partial field set to one record."""
        model = self.model_for(collection)
        try:
            updated = model.objects.filter(pk=record_id).update(**fields)
        except (ValidationError, ValueError):
            raise RecordNotFound(collection, record_id)
        except DatabaseError as e:
            logger.error(f"Updating {record_id} in '{collection}' failed: {e}")
            raise PersistenceFailure(str(e)) from e

        if not updated:
            raise RecordNotFound(collection, record_id)

    def delete(self, collection, record_id):
        model = self.model_for(collection)
        try:
            deleted, _ = model.objects.filter(pk=record_id).delete()
        except (ValidationError, ValueError):
            raise RecordNotFound(collection, record_id)
        except DatabaseError as e:
            logger.error(f"Deleting {record_id} from '{collection}' failed: {e}")
            raise PersistenceFailure(str(e)) from e

        if not deleted:
            raise RecordNotFound(collection, record_id)
