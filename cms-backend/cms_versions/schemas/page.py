"""Pydantic schemas for page state and the page endpoints.

Page and section state are serialized with camelCase keys. The same keys
are stored in the snapshot JSON columns and reported as field names in
comparisons. Both state models accept unknown fields and carry them along
unchanged, so new content fields need no schema change to be versioned
and diffed.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SectionState(CamelModel):
    """A content block inside a page, identified by its section key."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    section_key: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Stable key, unique within the page",
        examples=["hero"],
    )
    section_type: Optional[str] = Field(
        None,
        description="Section type tag (hero, cta, features, ...)",
    )
    title: Optional[str] = None
    subtitle: Optional[str] = None
    content: dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form content fields",
    )
    order: int = Field(0, description="Display position")
    is_visible: bool = True
    css_classes: Optional[str] = None
    custom_styles: Optional[dict[str, Any]] = None


class PageState(CamelModel):
    """Full state of a page: page-level fields plus ordered sections."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Page title",
        examples=["Home"],
    )
    slug: Optional[str] = Field(None, max_length=255)
    page_type: Optional[str] = None
    status: str = Field("draft", description="draft, published or archived")
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    og_image: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    structured_data: Optional[Any] = None
    layout: Optional[str] = None
    template_id: Optional[str] = None
    published_at: Optional[datetime] = None
    sections: list[SectionState] = Field(default_factory=list)

    @field_validator("sections")
    @classmethod
    def validate_unique_section_keys(cls, v: list[SectionState]) -> list[SectionState]:
        seen: set[str] = set()
        for section in v:
            if section.section_key in seen:
                raise ValueError(f"Duplicate section key: {section.section_key}")
            seen.add(section.section_key)
        return v

    def page_payload(self) -> dict[str, Any]:
        """Page-level fields as stored in a snapshot (no sections)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"sections"})

    def sections_payload(self) -> list[dict[str, Any]]:
        """Sections as stored in a snapshot, in page order."""
        return [section.model_dump(mode="json", by_alias=True) for section in self.sections]

    @classmethod
    def from_payload(
        cls,
        page_snapshot: dict[str, Any],
        sections_snapshot: list[dict[str, Any]],
    ) -> "PageState":
        """Rebuild a state from the two snapshot JSON columns."""
        return cls.model_validate({**page_snapshot, "sections": sections_snapshot})


class PageCreate(CamelModel):
    """Schema for creating a page together with its first version."""

    page_key: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Unique page key",
        examples=["home"],
    )
    state: PageState
    created_by: Optional[str] = Field(None, max_length=255)
    change_description: Optional[str] = Field(
        None,
        description="Description for version 1 (defaults to 'Initial version')",
    )


class PageUpdate(CamelModel):
    """Schema for editing a page. Every edit appends a snapshot."""

    state: PageState
    changed_by: Optional[str] = Field(None, max_length=255)
    change_description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    expected_version: Optional[int] = Field(
        None,
        ge=1,
        description="Latest version number the client edited from; 409 if it moved",
    )


class PageResponse(CamelModel):
    """Current page: the state of its latest snapshot."""

    id: UUID
    page_key: str
    version_id: UUID
    version_number: int
    state: PageState
    updated_at: datetime
