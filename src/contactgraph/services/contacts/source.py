"""
Contact loading and cache enrichment.

Contacts are read from a JSON export: either a list of contact objects or
an object with a ``contacts`` list. Field names follow the contact store,
so camelCase keys such as ``phoneNumber`` and ``imageUrl`` are accepted.
"""

import json
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ...shared import get_logger, timed_operation
from ...shared.exceptions import ContactSourceError
from ...shared.infrastructure.cache.contact_cache import ContactCache, get_contact_cache
from ...shared.models.contact import Contact

logger = get_logger(__name__)


def parse_contacts(data: Any) -> List[Contact]:
    """
    Validate raw contact records.

    Args:
        data: List of contact dicts, or a dict with a ``contacts`` list

    Returns:
        Validated contacts in input order

    Raises:
        ContactSourceError: If the data is not a list or a record is invalid
    """
    if isinstance(data, dict):
        data = data.get("contacts")
    if not isinstance(data, list):
        raise ContactSourceError("Contact data must be a list of contact objects")

    contacts = []
    for index, record in enumerate(data):
        try:
            contacts.append(Contact.model_validate(record))
        except PydanticValidationError as e:
            raise ContactSourceError(f"Invalid contact at index {index}: {e}")
    return contacts


@timed_operation("contacts_load")
def load_contacts(path: Union[str, Path]) -> List[Contact]:
    """
    Load contacts from a JSON file.

    Raises:
        ContactSourceError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ContactSourceError(f"Cannot read contacts file {path}: {e}")
    except json.JSONDecodeError as e:
        raise ContactSourceError(f"Contacts file {path} is not valid JSON: {e}")

    contacts = parse_contacts(data)
    logger.info(f"Loaded {len(contacts)} contacts from {path}")
    return contacts


def apply_cached_tags(contacts: Iterable[Contact], cache: Optional[ContactCache] = None) -> List[Contact]:
    """
    Fill in missing hashtags and summaries from the contact cache.

    Values already present on a contact are kept as they are.

    Args:
        contacts: Contacts to enrich
        cache: Cache to read from, defaults to the process-wide cache

    Returns:
        Contacts with cached data applied, in input order
    """
    cache = cache or get_contact_cache()
    enriched = []
    hits = 0
    for contact in contacts:
        if contact.hashtags and contact.summary:
            enriched.append(contact)
            continue

        cached = cache.get(contact.name, contact.phone_number)
        if cached is None:
            enriched.append(contact)
            continue

        update = {}
        if not contact.hashtags and cached.hashtags:
            update['hashtags'] = cached.hashtags
        if not contact.summary and cached.summary:
            update['summary'] = cached.summary
        if update:
            hits += 1
            contact = Contact.model_validate({**contact.model_dump(), **update})
        enriched.append(contact)

    logger.info(f"Applied cached data to {hits} contacts")
    return enriched
