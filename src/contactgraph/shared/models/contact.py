"""
Contact data model for ContactGraph.

Contacts arrive from the contact store (or a JSON export of it) with
hashtags already attached. The graph engine only reads ``id``, ``name``
and ``hashtags``; the remaining fields are carried for ranking, caching
and presentation.
"""

from typing import Optional, Tuple
from pydantic import ConfigDict, Field, field_validator

from .base import FrozenModel


class Contact(FrozenModel):
    """
    A single entry of the user's contact book.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Unique contact identifier")
    name: str = Field(..., description="Display name")
    phone_number: str = Field(default="", alias="phoneNumber", description="Primary phone number")
    email: Optional[str] = Field(default=None, description="Email address")
    image_url: Optional[str] = Field(default=None, alias="imageUrl", description="Avatar URL")
    company: Optional[str] = Field(default=None, description="Company name")
    hashtags: Tuple[str, ...] = Field(default=(), description="Topical hashtags, unique per contact")
    summary: Optional[str] = Field(default=None, description="Free-text note about the contact")

    @field_validator('id', 'name')
    @classmethod
    def validate_required_text(cls, v):
        """Reject blank identifiers and names."""
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator('phone_number', mode='before')
    @classmethod
    def validate_phone_number(cls, v):
        return v or ""

    @field_validator('hashtags', mode='before')
    @classmethod
    def normalize_hashtags(cls, v):
        """Strip, drop blanks and de-duplicate while keeping first-seen order."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = v.split(",")
        seen = []
        for tag in v:
            tag = str(tag).strip()
            if tag and tag not in seen:
                seen.append(tag)
        return tuple(seen)

    @property
    def tag_set(self) -> frozenset:
        """Hashtags as a set."""
        return frozenset(self.hashtags)

    @property
    def initials(self) -> str:
        """Two-letter initials drawn inside the contact's node."""
        parts = self.name.split()
        if len(parts) >= 2:
            return (parts[0][0] + parts[1][0]).upper()
        return self.name[:2].upper()
