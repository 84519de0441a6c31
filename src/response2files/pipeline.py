"""Main orchestration for parsing a model response."""

import structlog

from .config import settings
from .detection import detect_format
from .errors import DiagnosticKind, InputTooLargeError, diagnostic
from .extractors.base import ExtractionState
from .router import Router
from .schemas.result import ParseResult, ParserOptions, ResponseFormat

logger = structlog.get_logger(__name__)

EMPTY_RESPONSE_ERROR = "Empty or invalid response"


class ParsePipeline:
    """
    Detect, dispatch, recover, assemble.

    Input: the full response text accumulated so far
    Output: a fresh ParseResult; nothing is carried between runs
    """

    def __init__(self, options: ParserOptions | None = None):
        """
        Initialize the pipeline.

        Args:
            options: Per-call overrides (default: values from settings)
        """
        self.options = options or ParserOptions()
        self.max_size = self.options.max_size or settings.max_response_size
        self.aggressive_recovery = (
            settings.aggressive_recovery
            if self.options.aggressive_recovery is None
            else self.options.aggressive_recovery
        )
        self.router = Router()

    def run(self, text: str) -> ParseResult:
        """
        Parse one response.

        Args:
            text: Raw model output

        Returns:
            ParseResult; content problems are reported in warnings/errors

        Raises:
            InputTooLargeError: If the text exceeds the size ceiling
        """
        state = ExtractionState()
        raw = text if self.options.include_raw and isinstance(text, str) else None

        if not isinstance(text, str) or not text.strip():
            state.error(EMPTY_RESPONSE_ERROR)
            return state.to_result(ResponseFormat.UNKNOWN, raw_response=raw)

        if len(text) > self.max_size:
            raise InputTooLargeError(len(text), self.max_size)

        detected = detect_format(text)
        response_format = detected

        extractor = self.router.get_extractor(detected)
        if extractor:
            extractor(text, state)
        else:
            state.error(
                diagnostic(DiagnosticKind.NO_STRUCTURE_FOUND, "Could not detect response format")
            )

        chain = []
        if self.aggressive_recovery and detected == ResponseFormat.UNKNOWN:
            chain = self.router.recovery_chain()
        for candidate, recover in chain:
            recover(text, state)
            if state.files:
                response_format = self.router.label(candidate, state)
                break

        logger.debug(
            "Parsed response",
            detected=detected.value,
            format=response_format.value,
            files=len(state.files),
            incomplete=len(state.incomplete_files),
            truncated=state.truncated,
            warnings=len(state.warnings),
            errors=len(state.errors),
        )

        return state.to_result(response_format, raw_response=raw)


def parse(text: str, options: ParserOptions | None = None) -> ParseResult:
    """
    Parse a model response into files and metadata.

    Safe to call repeatedly on a growing buffer: each call re-parses the
    whole text from scratch.

    Args:
        text: Raw model output
        options: Per-call overrides

    Returns:
        ParseResult
    """
    return ParsePipeline(options).run(text)
