from abc import ABC, abstractmethod

from agridoc.results.outcome import PipelineOutcome
from agridoc.utils.data_types import RawResponse


class BaseMapper(ABC):
    """
    Abstract base class for turning a model API response into a pipeline outcome.
    """

    @abstractmethod
    def interpret(self, raw: RawResponse) -> PipelineOutcome:
        """Map a delivered response onto an outcome.

        Args:
            raw: The 2xx response returned by the client.

        Returns:
            Success, NoCropDetected, Incomplete or Failure. Never raises for bad model output.
        """
        pass
