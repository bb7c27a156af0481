from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class DeliveryResult:
    delivered: bool
    # True when no transport is configured and the code only went to the log
    simulated: bool = False


class BaseCodeSender(ABC):
    channel: str

    @abstractmethod
    async def send(self, identifier: str, code: str, purpose: str) -> DeliveryResult:
        """Deliver code to identifier; transport errors propagate to the caller."""
