"""Render stored asset references as displayable URLs."""

from datetime import datetime
from typing import Any

from core.media.paths import resolve_display_url
from core.models.entity import ADDITIONAL_IMAGES_FIELD, EntityType, main_image_field

Record = dict[str, Any]


def _cache_bust(updated_at: Any) -> int | None:
    # The main image is overwritten in place, so clients need a fresh URL
    # whenever the record changes.
    if not isinstance(updated_at, str):
        return None
    try:
        return int(datetime.fromisoformat(updated_at).timestamp())
    except ValueError:
        return None


def present_record(
    record: Record,
    entity_type: EntityType,
    *,
    base_url: str | None = None,
) -> Record:
    """Copy of `record` with `main_image_display_url` and `additional_image_urls`."""
    presented = dict(record)
    main_field = main_image_field(entity_type)

    presented["main_image_display_url"] = resolve_display_url(
        record.get(main_field),
        entity_type,
        base_url=base_url,
        cache_bust=_cache_bust(record.get("updated_at")),
    )
    presented["additional_image_urls"] = [
        url
        for url in (
            resolve_display_url(ref, entity_type, base_url=base_url)
            for ref in record.get(ADDITIONAL_IMAGES_FIELD) or []
        )
        if url
    ]

    return presented
