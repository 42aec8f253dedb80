"""Storage key encoding and asset reference resolution.

Every object key lives under its owning entity's prefix::

    <entity_id>/main.jpg            main image, overwritten in place
    <entity_id>/<millis>_<n>.jpg    additional images, never collide

A persisted asset reference is either such a key or a public URL of the
form ``<base>/storage/v1/object/public/<bucket>/<key>`` that may carry a
cache-busting query string.
"""

import os
from urllib.parse import unquote, urlsplit

from core.media.buckets import resolve_bucket
from core.models.entity import EntityType
from core.utils.constants import (
    DEFAULT_IMAGE_EXTENSION,
    ENV_STORAGE_PUBLIC_BASE_URL,
    MAIN_IMAGE_STEM,
    PUBLIC_OBJECT_PATH,
)

BucketOrType = EntityType | str | None


def entity_prefix(entity_id: str) -> str:
    return f"{entity_id}/"


def encode_key(entity_id: str, disambiguator: str | int, ext: str = DEFAULT_IMAGE_EXTENSION) -> str:
    """Build ``<entity_id>/<disambiguator>.<ext>``."""
    if not entity_id or "/" in entity_id:
        raise ValueError("Invalid entity id for storage key")

    return f"{entity_prefix(entity_id)}{disambiguator}.{ext.lstrip('.')}"


def encode_main_key(entity_id: str, ext: str = DEFAULT_IMAGE_EXTENSION) -> str:
    return encode_key(entity_id, MAIN_IMAGE_STEM, ext)


def encode_additional_key(
    entity_id: str,
    disambiguator: int,
    index: int,
    ext: str = DEFAULT_IMAGE_EXTENSION,
) -> str:
    return encode_key(entity_id, f"{disambiguator}_{index}", ext)


def _bucket_name(bucket_or_type: BucketOrType) -> str:
    # A known entity tag resolves to its bucket; anything else is taken as
    # a literal bucket name.
    if isinstance(bucket_or_type, EntityType):
        return resolve_bucket(bucket_or_type)
    if bucket_or_type and EntityType.parse(bucket_or_type) is None:
        return bucket_or_type
    return resolve_bucket(bucket_or_type)


def _strip_query(reference: str) -> str:
    return reference.split("#", 1)[0].split("?", 1)[0]


def _is_url(reference: str) -> bool:
    return "://" in reference


def decode_key(reference: str | None, bucket_or_type: BucketOrType) -> str | None:
    """Recover the bucket-relative key from a stored asset reference.

    Returns None when there is nothing to resolve: empty input, or a URL
    whose path has no segment for the expected bucket.
    """
    if not reference or not isinstance(reference, str):
        return None

    cleaned = _strip_query(reference.strip())
    if not cleaned:
        return None

    if not _is_url(cleaned):
        key = cleaned.lstrip("/")
        return key or None

    bucket = _bucket_name(bucket_or_type)
    path = unquote(urlsplit(cleaned).path)
    marker = f"/{bucket}/"

    position = path.find(marker)
    if position == -1:
        return None

    key = path[position + len(marker):]
    return key or None


def public_base_url(base_url: str | None = None) -> str:
    base = base_url if base_url is not None else os.getenv(ENV_STORAGE_PUBLIC_BASE_URL, "")
    return base.rstrip("/")


def public_url(key: str, bucket_or_type: BucketOrType, base_url: str | None = None) -> str:
    bucket = _bucket_name(bucket_or_type)
    return f"{public_base_url(base_url)}{PUBLIC_OBJECT_PATH}/{bucket}/{key.lstrip('/')}"


def resolve_display_url(
    reference: str | None,
    bucket_or_type: BucketOrType,
    *,
    base_url: str | None = None,
    cache_bust: str | int | None = None,
) -> str | None:
    """Turn a stored asset reference into a URL a client can display."""
    if not reference:
        return None

    cleaned = _strip_query(reference.strip())
    if not cleaned:
        return None

    url = cleaned if _is_url(cleaned) else public_url(cleaned, bucket_or_type, base_url)

    if cache_bust is not None:
        url = f"{url}?t={cache_bust}"

    return url


def normalize_reference(reference: str | None, bucket_or_type: BucketOrType) -> str | None:
    """Canonical persisted form of a reference: the bare object key.

    URLs pointing outside the expected bucket are kept verbatim so that
    foreign images survive a round trip through an edit.
    """
    if not reference:
        return None

    key = decode_key(reference, bucket_or_type)
    if key is None:
        return reference
    return key
