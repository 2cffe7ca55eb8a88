"""Base reporter interface."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from obscli.models import BatchResult, ObsResponse, PartDescriptor


class Reporter(ABC):
    """Abstract base class for command result reporters."""

    @abstractmethod
    def on_response(
        self,
        action: str,
        response: "ObsResponse",
        rows: Optional[list[dict[str, str]]] = None,
    ) -> None:
        """Called with the response of a single-request command."""
        pass

    @abstractmethod
    def on_batch_complete(self, action: str, result: "BatchResult") -> None:
        """Called when every unit of a batch command has finished."""
        pass

    @abstractmethod
    def on_part_complete(self, part: "PartDescriptor", total_parts: int) -> None:
        """Called when one part of a multipart upload finishes."""
        pass

    @abstractmethod
    def on_error(self, action: str, message: str) -> None:
        """Called when a command fails before producing a response."""
        pass

    @abstractmethod
    def on_run_complete(self) -> None:
        """Called once when the command is finished."""
        pass
