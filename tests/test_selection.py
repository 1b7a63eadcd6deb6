"""
Highlight and search tests.
"""

import pytest

from contactgraph.services.graph_view import (
    SelectionEvent, SelectionIndex, SelectionMode, TagSelectionPolicy
)
from contactgraph.shared.models import Contact, GraphNode


@pytest.fixture
def focused():
    return []


@pytest.fixture
def index(contacts, focused):
    def on_focus(node_id):
        focused.append(node_id)
        return True

    selection = SelectionIndex(on_focus=on_focus)
    selection.build_index(contacts)
    return selection


# =============================================================================
# TAG INDEX
# =============================================================================

class TestTagIndex:

    def test_index_maps_tags_to_contacts(self, index, alice, bob):
        assert index.contacts_for_tag("sf") == [alice, bob]
        assert index.contacts_for_tag("pm") == [alice]
        assert index.contacts_for_tag("ops") == []

    def test_tags_in_first_seen_order(self, index):
        assert index.tags == ["sf", "pm"]

    def test_rebuild_clears_highlight(self, index, contacts):
        index.select_tag("sf")
        index.build_index(contacts)
        assert index.state.is_empty
        assert index.mode == SelectionMode.IDLE


# =============================================================================
# TAPS
# =============================================================================

class TestSelectTag:

    def test_select_tag_highlights_its_contacts(self, index, focused):
        result = index.select_tag("sf")

        assert result.event == SelectionEvent.HIGHLIGHTED
        assert index.state.contact_ids == {"a", "b"}
        assert index.state.tags == {"sf"}
        assert index.mode == SelectionMode.TAG
        assert focused == ["tag:sf"]
        assert result.centered

    def test_second_tag_replaces_by_default(self, index):
        index.select_tag("sf")
        index.select_tag("pm")

        assert index.state.contact_ids == {"a"}
        assert index.state.tags == {"pm"}

    def test_accumulate_policy_unions_tags(self, contacts):
        index = SelectionIndex(policy=TagSelectionPolicy.ACCUMULATE)
        index.build_index(contacts + [Contact(id="c", name="Cy", hashtags=["ops"])])

        index.select_tag("pm")
        index.select_tag("ops")

        assert index.state.contact_ids == {"a", "c"}
        assert index.state.tags == {"pm", "ops"}

    def test_accumulate_starts_fresh_after_contact_selection(self, alice, contacts):
        index = SelectionIndex(policy="accumulate")
        index.build_index(contacts)

        index.select_contact(alice)
        index.select_tag("sf")

        assert index.state.tags == {"sf"}
        assert index.state.contact_ids == {"a", "b"}

    def test_unknown_tag_is_unchanged(self, index, focused):
        index.select_tag("pm")
        before = index.state

        result = index.select_tag("nope")

        assert result.event == SelectionEvent.UNCHANGED
        assert index.state == before
        assert focused == ["tag:pm"]


class TestSelectContact:

    def test_select_contact_highlights_contact_and_tags(self, index, alice, focused):
        result = index.select_contact(alice)

        assert result.event == SelectionEvent.HIGHLIGHTED
        assert result.contact == alice
        assert index.state.contact_ids == {"a"}
        assert index.state.tags == {"sf", "pm"}
        assert index.mode == SelectionMode.CONTACT
        assert focused == ["contact:a"]

    def test_second_tap_requests_detail(self, index, alice, focused):
        index.select_contact(alice)
        before = index.state

        result = index.select_contact(alice)

        assert result.wants_detail
        assert result.contact == alice
        assert index.state == before
        assert focused == ["contact:a"]

    def test_tap_on_sole_contact_of_tag_requests_detail(self, index, alice, focused):
        index.select_tag("pm")
        before = index.state

        result = index.select_contact(alice)

        assert result.event == SelectionEvent.DETAIL_REQUESTED
        assert result.contact == alice
        assert index.state == before
        assert focused == ["tag:pm"]

    def test_tap_on_one_of_several_tagged_contacts_highlights(self, index, alice):
        index.select_tag("sf")

        result = index.select_contact(alice)

        assert result.event == SelectionEvent.HIGHLIGHTED
        assert index.state.contact_ids == {"a"}
        assert index.mode == SelectionMode.CONTACT

    def test_tap_after_search_match_requests_detail(self, index, alice):
        index.search("ali")
        assert index.select_contact(alice).wants_detail

    def test_other_contact_replaces_highlight(self, index, alice, bob):
        index.select_contact(alice)
        index.select_contact(bob)

        assert index.state.contact_ids == {"b"}
        assert index.state.tags == {"sf"}

    def test_without_focus_callback_nothing_is_centered(self, contacts, alice):
        index = SelectionIndex()
        index.build_index(contacts)
        assert index.select_contact(alice).centered is False


# =============================================================================
# SEARCH
# =============================================================================

class TestSearch:

    def test_blank_query_clears(self, index):
        index.select_tag("sf")

        for query in ("", "   "):
            index.select_tag("sf")
            result = index.search(query)
            assert result.event == SelectionEvent.CLEARED
            assert index.state.is_empty
            assert index.mode == SelectionMode.IDLE

    def test_contact_name_match_wins(self, index):
        result = index.search("ALI")

        assert result.node_id == "contact:a"
        assert index.state.contact_ids == {"a"}
        assert index.mode == SelectionMode.CONTACT

    def test_first_contact_in_order_wins(self, index):
        index.search("b")
        assert index.state.contact_ids == {"b"}

        index.search("o")
        assert index.state.contact_ids == {"b"}

    def test_tag_match_when_no_contact_matches(self, index, focused):
        result = index.search("P")

        assert result.node_id == "tag:pm"
        assert index.state.tags == {"pm"}
        assert index.state.contact_ids == {"a"}
        assert focused == ["tag:pm"]

    def test_search_never_requests_detail(self, index):
        index.search("alice")
        result = index.search("alice")
        assert result.event == SelectionEvent.HIGHLIGHTED

    def test_surrounding_whitespace_is_part_of_the_query(self, index):
        result = index.search(" al")

        assert result.event == SelectionEvent.UNCHANGED
        assert index.state.is_empty

        index.search("ali")
        assert index.state.contact_ids == {"a"}

    def test_no_match_is_unchanged(self, index):
        index.select_tag("sf")
        before = index.state

        result = index.search("zzz")

        assert result.event == SelectionEvent.UNCHANGED
        assert index.state == before

    def test_clear(self, index, focused):
        index.select_tag("sf")
        result = index.clear()

        assert result.event == SelectionEvent.CLEARED
        assert index.state.is_empty
        assert focused == ["tag:sf"]


class TestSelectionState:

    def test_is_node_highlighted(self, index, alice, bob):
        index.select_tag("pm")
        state = index.state

        assert state.is_node_highlighted(GraphNode.for_contact(alice))
        assert not state.is_node_highlighted(GraphNode.for_contact(bob))
        assert state.is_node_highlighted(GraphNode.for_tag("pm"))
        assert not state.is_node_highlighted(GraphNode.for_tag("sf"))
