"""
Contact ranking for list views.
"""

from typing import Iterable, List

from ...shared.models.contact import Contact


def _matches(contact: Contact, query: str) -> bool:
    fields = [contact.name, contact.phone_number, contact.email or "", contact.summary or ""]
    fields.extend(contact.hashtags)
    return any(query in field.lower() for field in fields)


def rank_contacts(contacts: Iterable[Contact], query: str = "") -> List[Contact]:
    """
    Filter and order contacts for a search query.

    A blank query returns every contact. Otherwise a contact is kept when
    its name, phone number, email, summary or any hashtag contains the
    query, ignoring case. Results are sorted by name, ignoring case.
    """
    contacts = list(contacts)
    if query and query.strip():
        needle = query.lower()
        contacts = [contact for contact in contacts if _matches(contact, needle)]
    return sorted(contacts, key=lambda contact: contact.name.casefold())
