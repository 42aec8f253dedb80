"""Maps entity types to their fixed storage bucket."""

from collections.abc import Mapping

from core.models.entity import EntityType
from core.utils.constants import (
    BUCKET_AVATARS,
    BUCKET_BUY_ORDER_IMAGES,
    BUCKET_LISTING_IMAGES,
    DEFAULT_BUCKET,
)

BUCKETS: Mapping[EntityType, str] = {
    EntityType.SALE: BUCKET_LISTING_IMAGES,
    EntityType.WANT_TO_BUY: BUCKET_BUY_ORDER_IMAGES,
    EntityType.AVATAR: BUCKET_AVATARS,
}


def resolve_bucket(entity_type: EntityType | str | None) -> str:
    """Return the bucket for an entity type; unknown tags get the default bucket."""
    parsed = EntityType.parse(entity_type)
    if parsed is None:
        return DEFAULT_BUCKET
    return BUCKETS[parsed]
