"""Entity types and the image fields their records carry."""

from enum import Enum


class EntityType(str, Enum):
    """Kinds of records that own image assets."""

    SALE = "sale"
    WANT_TO_BUY = "want_to_buy"
    AVATAR = "avatar"

    @classmethod
    def parse(cls, tag: "EntityType | str | None") -> "EntityType | None":
        """Map a tag (or one of its aliases) to an entity type, or None."""
        if isinstance(tag, EntityType):
            return tag

        if not tag:
            return None

        return _ALIASES.get(str(tag).strip().lower())


_ALIASES: dict[str, EntityType] = {
    "sale": EntityType.SALE,
    "sell": EntityType.SALE,
    "listing": EntityType.SALE,
    "product": EntityType.SALE,
    "want_to_buy": EntityType.WANT_TO_BUY,
    "want-to-buy": EntityType.WANT_TO_BUY,
    "buy": EntityType.WANT_TO_BUY,
    "buy_order": EntityType.WANT_TO_BUY,
    "buy-order": EntityType.WANT_TO_BUY,
    "avatar": EntityType.AVATAR,
    "profile": EntityType.AVATAR,
}


class UploadMode(str, Enum):
    """How an upload batch is associated with its entity."""

    REPLACE_MAIN = "replace-main"
    APPEND_ADDITIONAL = "append-additional"


ADDITIONAL_IMAGES_FIELD = "additional_images"

MAIN_IMAGE_FIELDS: dict[EntityType, str] = {
    EntityType.SALE: "main_image_url",
    EntityType.WANT_TO_BUY: "main_image_url",
    EntityType.AVATAR: "avatar_url",
}


def main_image_field(entity_type: EntityType) -> str:
    return MAIN_IMAGE_FIELDS[entity_type]
