"""Marketplace monitor — read-only projection over the event journal."""

from mintmarket.monitor.projection import ActiveItem, ListingProjection, MarketSnapshot
from mintmarket.monitor.renderer import MarketRenderer

__all__ = ["ActiveItem", "ListingProjection", "MarketRenderer", "MarketSnapshot"]
