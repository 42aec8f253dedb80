"""Marketplace Media Service Package."""

__version__ = "1.0.0"
__description__ = (
    "Serverless image asset lifecycle for marketplace listings, buy-orders and avatars"
)

__all__ = ["handlers", "core"]
