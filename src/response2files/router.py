"""Router for determining which extractor handles each response format."""

from typing import Callable

import structlog

from .extractors import (
    ExtractionState,
    extract_fallback,
    extract_json_v1,
    extract_json_v2,
    extract_marker,
)
from .schemas.result import ResponseFormat

logger = structlog.get_logger(__name__)

Extractor = Callable[[str, ExtractionState], None]


class Router:
    """
    Routes responses to extractors:
    - JSON v1 / v2 -> JSON extractor
    - Marker v1 / v2 -> marker extractor
    - Fallback -> fenced code block extractor
    - Unknown -> nothing; the recovery chain takes over
    """

    # Tried in order for unrecognised responses until one yields files
    RECOVERY_ORDER = (ResponseFormat.JSON_V1, ResponseFormat.MARKER_V1, ResponseFormat.FALLBACK)

    def __init__(self):
        self.extractors: dict[ResponseFormat, Extractor] = {
            ResponseFormat.JSON_V1: extract_json_v1,
            ResponseFormat.JSON_V2: extract_json_v2,
            ResponseFormat.MARKER_V1: extract_marker,
            ResponseFormat.MARKER_V2: extract_marker,
            ResponseFormat.FALLBACK: extract_fallback,
        }

    def get_extractor(self, response_format: ResponseFormat) -> Extractor | None:
        """
        Get the extractor for a detected format.

        Args:
            response_format: Detected format

        Returns:
            Extractor function, or None for unknown
        """
        extractor = self.extractors.get(response_format)
        logger.debug(
            "Routing response",
            format=response_format.value,
            extractor=extractor.__name__ if extractor else None,
        )
        return extractor

    def recovery_chain(self) -> list[tuple[ResponseFormat, Extractor]]:
        """Extractors to try, in order, when no format was detected."""
        return [(candidate, self.extractors[candidate]) for candidate in self.RECOVERY_ORDER]

    @staticmethod
    def label(candidate: ResponseFormat, state: ExtractionState) -> ResponseFormat:
        """Refine a recovered format to v2 when v2 metadata was found."""
        if candidate.is_json and (state.meta or state.batch or state.manifest):
            return ResponseFormat.JSON_V2
        if candidate.is_marker and state.meta:
            return ResponseFormat.MARKER_V2
        return candidate
