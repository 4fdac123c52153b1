"""Engine availability probe."""

from ..models import EngineAvailability
from ..utils.logging import get_logger
from .provider import LLMProvider

logger = get_logger(__name__)


class AvailabilityProbe:
    """Asks the provider whether the engine is usable, without side effects.

    A probe never raises: anything the provider throws is reported as an
    UNKNOWN availability so callers always get a classification.
    """

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    def probe(self) -> EngineAvailability:
        try:
            availability = self.provider.check_availability()
        except Exception as e:
            logger.exception("Availability check failed")
            return EngineAvailability.unknown(str(e))

        logger.info(
            f"Engine availability: {availability.status.value}",
            extra_data={
                "provider": self.provider.provider_name,
                "reason": availability.reason.value if availability.reason else None,
                "detail": availability.detail,
            },
        )
        return availability
