"""Domain services of the booking workflow."""

from .availability import AvailabilityPeriod, AvailabilityService
from .pricing import PriceBreakdown, PricingService

__all__ = [
    "AvailabilityPeriod",
    "AvailabilityService",
    "PriceBreakdown",
    "PricingService",
]
