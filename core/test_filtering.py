"""
Tests for the filter engine (no database).
"""
import pytest
from unittest.mock import Mock

from core.filtering import (
    FilterPredicates,
    filter_records,
    run_filter,
    server_predicates,
)
from core.records import APPLICANT, CONTACT, RecordStore, where


@pytest.fixture
def contacts():
    # Store order: newest first
    return [
        {'id': 'c5', 'name': 'Eve', 'email': 'eve@example.com', 'subject': 'Partnership',
         'category': 'Business', 'message': 'Let us work together', 'status': 'New'},
        {'id': 'c4', 'name': 'Dan', 'email': 'dan@example.com', 'subject': 'Spam offer',
         'category': 'Other', 'message': 'Cheap stuff', 'status': 'Ignored'},
        {'id': 'c3', 'name': 'Carol', 'email': 'carol@example.com', 'subject': 'Careers',
         'category': 'Business', 'message': 'Open roles?', 'status': 'Replied'},
        {'id': 'c2', 'name': 'Bob', 'email': 'bob@example.com',
         'category': 'Support', 'message': 'My data annotation project', 'status': 'New'},
        {'id': 'c1', 'name': 'Alice', 'category': 'Support', 'message': 'Hello'},
    ]


@pytest.fixture
def applicants():
    return [
        {'id': 'a3', 'first_name': 'Ana', 'last_name': 'Cruz', 'email': 'ana@example.com',
         'job_title_applied': 'Data Annotator', 'department_applied': 'AI Data', 'status': 'Pending'},
        {'id': 'a2', 'first_name': 'Ben', 'last_name': 'Reyes', 'email': 'ben@example.com',
         'job_title_applied': 'Recruiter', 'department_applied': 'HR', 'status': 'Accepted'},
        {'id': 'a1', 'first_name': 'Cid', 'last_name': 'Tan',
         'job_title_applied': 'Engineer', 'department_applied': 'ai data', 'status': 'Rejected'},
    ]


def ids(records):
    return [record['id'] for record in records]


class TestStatusPredicate:

    def test_default_view_hides_ignored(self, contacts):
        result = filter_records(contacts, CONTACT, FilterPredicates())
        assert ids(result) == ['c5', 'c3', 'c2']

    def test_record_without_status_does_not_match_active_view(self, contacts):
        result = filter_records(contacts, CONTACT, FilterPredicates())
        assert 'c1' not in ids(result)

    def test_show_ignored_with_status_all_shows_only_ignored(self, contacts):
        predicates = FilterPredicates(include_ignored=True)
        result = filter_records(contacts, CONTACT, predicates)
        assert ids(result) == ['c4']

    def test_specific_status_wins_over_show_ignored(self, contacts):
        predicates = FilterPredicates(status='New', include_ignored=True)
        result = filter_records(contacts, CONTACT, predicates)
        assert ids(result) == ['c5', 'c2']

    def test_exact_ignored_status(self, contacts):
        result = filter_records(contacts, CONTACT, FilterPredicates(status='Ignored'))
        assert ids(result) == ['c4']

    def test_applicants_have_no_hidden_state(self, applicants):
        result = filter_records(applicants, APPLICANT, FilterPredicates())
        assert ids(result) == ['a3', 'a2', 'a1']


class TestCategoryPredicate:

    def test_contact_category_is_exact(self, contacts):
        result = filter_records(contacts, CONTACT, FilterPredicates(category='Business'))
        assert ids(result) == ['c5', 'c3']

        result = filter_records(contacts, CONTACT, FilterPredicates(category='business'))
        assert result == []

    def test_applicant_department_is_case_insensitive(self, applicants):
        result = filter_records(applicants, APPLICANT, FilterPredicates(category='AI DATA'))
        assert ids(result) == ['a3', 'a1']

    def test_missing_category_never_matches(self):
        records = [{'id': 'x', 'status': 'New'}]
        assert filter_records(records, CONTACT, FilterPredicates(category='Support')) == []


class TestSearchPredicate:

    def test_search_is_case_insensitive_substring(self, contacts):
        result = filter_records(contacts, CONTACT, FilterPredicates(search_term='ANNOTATION'))
        assert ids(result) == ['c2']

    def test_search_matches_any_text_field(self, contacts):
        result = filter_records(contacts, CONTACT, FilterPredicates(search_term='carol@'))
        assert ids(result) == ['c3']

    def test_missing_fields_are_not_found_without_error(self, applicants):
        # a1 has no email
        result = filter_records(applicants, APPLICANT, FilterPredicates(search_term='example.com'))
        assert ids(result) == ['a3', 'a2']

    def test_empty_term_matches_everything(self, applicants):
        result = filter_records(applicants, APPLICANT, FilterPredicates(search_term='   '))
        assert len(result) == 3

    def test_applicant_search_fields(self, applicants):
        result = filter_records(applicants, APPLICANT, FilterPredicates(search_term='recruit'))
        assert ids(result) == ['a2']


class TestFilterProperties:

    def test_predicates_are_conjunctive(self, contacts):
        predicates = FilterPredicates(status='New', category='Support', search_term='data')
        assert ids(filter_records(contacts, CONTACT, predicates)) == ['c2']

    def test_order_is_preserved(self, contacts):
        reordered = list(reversed(contacts))
        result = filter_records(reordered, CONTACT, FilterPredicates())
        assert ids(result) == ['c2', 'c3', 'c5']

    def test_filtering_is_idempotent(self, contacts):
        predicates = FilterPredicates(category='Business', search_term='e')
        once = filter_records(contacts, CONTACT, predicates)
        twice = filter_records(once, CONTACT, predicates)
        assert once == twice


class TestQueryParams:

    def test_from_query_params(self):
        predicates = FilterPredicates.from_query_params({
            'status': 'Replied', 'department': 'HR', 'search': ' ben ', 'show_ignored': 'true'
        }, category_param='department')
        assert predicates == FilterPredicates(
            status='Replied', category='HR', search_term='ben', include_ignored=True
        )

    def test_defaults(self):
        predicates = FilterPredicates.from_query_params({})
        assert predicates.status == 'All'
        assert predicates.category == 'All'
        assert predicates.search_term == ''
        assert predicates.only_ignored is False


class TestServerPredicates:

    def test_default_contact_view_excludes_ignored(self):
        assert server_predicates(CONTACT, FilterPredicates()) == [where('status', '!=', 'Ignored')]

    def test_show_ignored(self):
        pushed = server_predicates(CONTACT, FilterPredicates(include_ignored=True, category='Other'))
        assert pushed == [where('status', '==', 'Ignored'), where('category', '==', 'Other')]

    def test_applicant_department_is_not_pushed_down(self):
        assert server_predicates(APPLICANT, FilterPredicates(category='HR')) == []

    def test_run_filter_queries_newest_first(self, contacts):
        store = Mock(spec=RecordStore)
        store.query.return_value = contacts
        result = run_filter(store, CONTACT, FilterPredicates(search_term='eve'))

        store.query.assert_called_once_with(
            'contacts',
            predicates=[where('status', '!=', 'Ignored')],
            order_by='timestamp',
            direction='desc',
            limit=None,
        )
        assert ids(result) == ['c5']

    def test_unknown_operator_is_rejected(self):
        with pytest.raises(ValueError):
            where('status', 'in', ['New'])
