"""Simulated product recognition.

Stands in for a camera-based recognizer: it ignores the image and returns a
random catalog product with a high confidence most of the time.
"""

import asyncio
import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from src.personalization.models import BoundingBox, ScanResult

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_SUCCESS_RATE = 0.7
DEFAULT_DELAY_SECONDS = (1.0, 3.0)
CONFIDENCE_RANGE = (0.85, 1.0)


class MockRecognizer:
    """Random recognizer over a fixed set of product ids.

    Args:
        product_ids: Ids a successful scan may return.
        success_rate: Probability that a scan recognizes a product.
        seed: Random seed for reproducible scans.
        delay: (min, max) seconds to wait before answering.
    """

    def __init__(
        self,
        product_ids: Sequence[str],
        success_rate: float = DEFAULT_SUCCESS_RATE,
        seed: Optional[int] = None,
        delay: Tuple[float, float] = DEFAULT_DELAY_SECONDS,
    ):
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError(f"success_rate must be between 0 and 1, got {success_rate}")
        self.product_ids = list(product_ids)
        self.success_rate = success_rate
        self.delay = delay
        self._rng = np.random.default_rng(seed)

    async def recognize(self, image_data: str) -> Optional[ScanResult]:
        """Pretend to recognize a product in an image.

        Returns:
            A ScanResult, or None when nothing was recognized.
        """
        low, high = self.delay
        if high > 0:
            await asyncio.sleep(float(self._rng.uniform(low, high)))

        if not self.product_ids or self._rng.random() >= self.success_rate:
            logger.debug("Scan did not recognize a product")
            return None

        product_id = self.product_ids[int(self._rng.integers(len(self.product_ids)))]
        result = ScanResult(
            product_id=product_id,
            confidence=float(self._rng.uniform(*CONFIDENCE_RANGE)),
            bounding_box=BoundingBox(
                x=float(50 + self._rng.random() * 100),
                y=float(50 + self._rng.random() * 100),
                width=float(200 + self._rng.random() * 100),
                height=float(200 + self._rng.random() * 100),
            ),
        )
        logger.info(
            "Scan recognized product",
            extra={"product_id": product_id, "confidence": round(result.confidence, 3)},
        )
        return result
