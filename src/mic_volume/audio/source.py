"""Sample source interface consumed by the measurement loop."""

from abc import ABC, abstractmethod

import numpy as np


class SampleSource(ABC):
    """Supplies the most recent fixed-size buffer of raw samples."""

    @abstractmethod
    def get_buffer(self) -> np.ndarray:
        """
        Return the latest samples as a 1-D float32 array.

        Raises:
            SourceUnavailableError: If the capture session is gone
        """
