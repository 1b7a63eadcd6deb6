"""
Highlight and search state for the contact graph.
"""

from typing import Callable, Dict, Iterable, List, Optional

from ...shared import get_logger
from ...shared.models.contact import Contact
from ...shared.models.graph import GraphNode
from .models import (
    SelectionEvent, SelectionMode, SelectionState, TagSelectionPolicy, TapResult
)

FocusCallback = Callable[[str], bool]


class SelectionIndex:
    """
    Tracks which contacts and tags are highlighted.

    The tag index maps each hashtag to the contacts carrying it, in contact
    order. Highlight changes that should move the viewport call
    ``on_focus`` with the node id to center on; its return value is
    reported back as ``TapResult.centered``.
    """

    def __init__(self,
                 policy: TagSelectionPolicy = TagSelectionPolicy.REPLACE,
                 on_focus: Optional[FocusCallback] = None):
        self.policy = TagSelectionPolicy(policy)
        self.on_focus = on_focus
        self.logger = get_logger(__name__)

        self._contacts: List[Contact] = []
        self._index: Dict[str, List[Contact]] = {}
        self._state = SelectionState()

    # ========== Index ==========

    def build_index(self, contacts: Iterable[Contact]) -> Dict[str, List[Contact]]:
        """
        Rebuild the tag index and drop any highlight.

        Args:
            contacts: Contacts in display order

        Returns:
            Mapping of tag to the contacts carrying it
        """
        self._contacts = list(contacts)
        index: Dict[str, List[Contact]] = {}
        for contact in self._contacts:
            for tag in contact.hashtags:
                index.setdefault(tag, []).append(contact)
        self._index = index
        self._state = SelectionState()
        self.logger.debug(f"Indexed {len(index)} tags over {len(self._contacts)} contacts")
        return index

    @property
    def tags(self) -> List[str]:
        """Indexed tags in first-seen order."""
        return list(self._index)

    def contacts_for_tag(self, tag: str) -> List[Contact]:
        return list(self._index.get(tag, []))

    # ========== State ==========

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def mode(self) -> SelectionMode:
        return self._state.mode

    def is_highlighted(self, node: GraphNode) -> bool:
        return self._state.is_node_highlighted(node)

    # ========== Selection ==========

    def select_contact(self, contact: Contact) -> TapResult:
        """
        Highlight a contact and its tags, or request its detail view.

        A contact that is already the only highlighted contact, whether
        from a contact tap, a tag tap or a search, yields
        ``DETAIL_REQUESTED`` and leaves the highlight as it is.
        """
        if self._state.contact_ids == {contact.id}:
            self.logger.debug(f"Contact {contact.id} already selected, requesting detail view")
            return TapResult(
                event=SelectionEvent.DETAIL_REQUESTED,
                node_id=GraphNode.contact_node_id(contact.id),
                contact=contact,
            )
        return self._highlight_contact(contact)

    def select_tag(self, tag: str) -> TapResult:
        """
        Highlight a tag and every contact carrying it.

        Unknown tags leave the highlight unchanged. Under the accumulate
        policy a tag tap while tags are highlighted adds to the highlight.
        """
        if tag not in self._index:
            self.logger.debug(f"Ignoring unknown tag {tag!r}")
            return TapResult(event=SelectionEvent.UNCHANGED)
        accumulate = self.policy == TagSelectionPolicy.ACCUMULATE
        return self._highlight_tag(tag, accumulate=accumulate)

    def search(self, query: str) -> TapResult:
        """
        Highlight the first contact, or failing that the first tag, matching a query.

        Matching is a case-insensitive substring test on the query as typed,
        surrounding whitespace included. Contact names win over tags, and a
        search never requests the detail view. A blank query clears the
        highlight.
        """
        query = query or ""
        if not query.strip():
            return self.clear()

        needle = query.lower()

        for contact in self._contacts:
            if needle in contact.name.lower():
                return self._highlight_contact(contact)

        for tag in self._index:
            if needle in tag.lower():
                return self._highlight_tag(tag, accumulate=False)

        self.logger.debug(f"No contact or tag matches {query!r}")
        return TapResult(event=SelectionEvent.UNCHANGED)

    def clear(self) -> TapResult:
        """Remove every highlight without moving the viewport."""
        self._state = SelectionState()
        return TapResult(event=SelectionEvent.CLEARED)

    def _highlight_contact(self, contact: Contact) -> TapResult:
        self._state = SelectionState(
            contact_ids=frozenset({contact.id}),
            tags=frozenset(contact.hashtags),
            mode=SelectionMode.CONTACT,
        )
        node_id = GraphNode.contact_node_id(contact.id)
        return TapResult(
            event=SelectionEvent.HIGHLIGHTED,
            node_id=node_id,
            contact=contact,
            centered=self._focus(node_id),
        )

    def _highlight_tag(self, tag: str, accumulate: bool) -> TapResult:
        contact_ids = frozenset(contact.id for contact in self._index[tag])
        tags = frozenset({tag})
        if accumulate and self._state.mode == SelectionMode.TAG:
            contact_ids |= self._state.contact_ids
            tags |= self._state.tags

        self._state = SelectionState(contact_ids=contact_ids, tags=tags, mode=SelectionMode.TAG)
        node_id = GraphNode.tag_node_id(tag)
        return TapResult(
            event=SelectionEvent.HIGHLIGHTED,
            node_id=node_id,
            centered=self._focus(node_id),
        )

    def _focus(self, node_id: str) -> bool:
        if self.on_focus is None:
            return False
        return bool(self.on_focus(node_id))
