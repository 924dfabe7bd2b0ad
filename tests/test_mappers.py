"""
Unit tests for the entity mappers and the field humanizer.
"""

import pytest

from core.domain.models import Case
from core.errors import MappingError, ServiceError
from core.mappers import humanize, labelled_fields, map_case, map_case_list, map_filters
from core.response_tree import parse

from conftest import CASE_XML, FILTERS_XML, SEARCH_XML


class TestHumanize:
    """Tests for `humanize`."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("ixBug", "Bug"),
            ("sTitle", "Title"),
            ("status", "status"),
            ("Title", "Title"),
            ("ixBugParent", "BugParent"),
        ],
    )
    def test_humanize_when_identifier_given_then_label(self, name, expected):
        assert humanize(name) == expected


class TestMapFilters:
    """Tests for `map_filters`."""

    def test_map_when_two_filters_then_ordered_and_first_current(self):
        filters = map_filters(parse(FILTERS_XML))

        assert [f.name for f in filters] == ["Cases I should close", "My Cases"]
        assert filters[0].is_current
        assert not filters[1].is_current
        assert filters[0].filter_id == "304"
        assert filters[1].attributes["type"] == "builtin"

    def test_map_when_container_missing_then_mapping_error(self):
        with pytest.raises(MappingError):
            map_filters(parse(b"<response><cases/></response>"))

    def test_map_when_filter_has_no_text_then_empty_name(self):
        filters = map_filters(parse(b'<response><filters><filter sFilter="1"/></filters></response>'))

        assert filters[0].name == ""

    def test_map_when_service_error_then_service_error_with_code(self):
        root = parse(b'<response><error code="3">Not logged on</error></response>')

        with pytest.raises(ServiceError) as excinfo:
            map_filters(root)

        assert excinfo.value.code == "3"
        assert excinfo.value.message == "Not logged on"
        assert isinstance(excinfo.value, MappingError)


class TestMapCaseList:
    """Tests for `map_case_list`."""

    def test_map_when_search_response_then_description_and_cases(self):
        result = map_case_list(parse(SEARCH_XML))

        assert result.description == "All open cases assigned to me"
        assert [c.id for c in result.cases] == ["42", "43"]
        assert result.cases[0].field("sTitle") == "Crash on save"
        assert result.count == 2
        assert result.total is None

    def test_map_when_description_missing_then_empty_string(self):
        result = map_case_list(parse(b'<response><cases count="0"/></response>'))

        assert result.description == ""
        assert result.cases == []

    def test_map_when_cases_container_missing_then_mapping_error(self):
        with pytest.raises(MappingError):
            map_case_list(parse(b"<response><description>x</description></response>"))


class TestMapCase:
    """Tests for `map_case`."""

    def test_map_when_events_field_then_two_events_with_descriptions(self):
        node = parse(CASE_XML).first_child_named("cases").first_child_named("case")

        case = map_case(node)

        assert len(case.events) == 2
        assert all(event.description for event in case.events)
        assert case.events[0].description == "Opened by Ana"

    def test_map_when_events_field_then_not_in_flat_fields(self):
        node = parse(CASE_XML).first_child_named("cases").first_child_named("case")

        case = map_case(node)

        assert case.id == "42"
        assert case.attributes["operations"] == "edit"
        assert case.fields == [("sTitle", "Crash on save"), ("sPriority", "Must Fix")]

    def test_map_when_no_events_field_then_empty_events(self):
        case = map_case(parse(b'<case ixBug="7"><sTitle>t</sTitle></case>'))

        assert case.events == []

    def test_map_when_optional_values_missing_then_empty_strings(self):
        case = map_case(parse(b"<case><sTitle/><events><event/></events></case>"))

        assert case.id == ""
        assert case.fields == [("sTitle", "")]
        assert case.events[0].description == ""

    def test_map_when_id_only_as_field_then_id_from_field(self):
        case = map_case(parse(b"<case><ixBug>9</ixBug></case>"))

        assert case.id == "9"

    def test_labelled_fields_when_case_then_human_labels(self):
        case = Case(id="1", fields=[("sTitle", "t"), ("ixPriority", "2")])

        assert labelled_fields(case) == [("sTitle", "Title", "t"), ("ixPriority", "Priority", "2")]
