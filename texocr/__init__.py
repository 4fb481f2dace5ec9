"""
TexOCR Pipeline Package
"""

from .assembler import DocumentAssembler, Manifest, build_preamble
from .config import PipelineConfig, validate_config
from .errors import (
    ConfigurationError,
    CurrentPageRenderMissing,
    PageExhausted,
    RenderUnavailable,
    ResponseParseError,
    RunAborted,
    ServiceFault,
    ServiceQuotaExhausted,
    TexOCRError,
)
from .loop import OCRPipeline, RunResult
from .notifier import PushoverNotifier
from .recognizer import GeminiRecognizer, Recognition
from .renderer import PageRenderer
from .resume import determine_start_page, find_page_units
from .retry import AttemptState, PageOutcome, RetryController
from .usage import UsageTracker
from .window import ContextWindow, build_window

__version__ = "0.1.0"

__all__ = [
    "AttemptState",
    "ConfigurationError",
    "ContextWindow",
    "CurrentPageRenderMissing",
    "DocumentAssembler",
    "GeminiRecognizer",
    "Manifest",
    "OCRPipeline",
    "PageExhausted",
    "PageOutcome",
    "PageRenderer",
    "PipelineConfig",
    "PushoverNotifier",
    "Recognition",
    "RenderUnavailable",
    "ResponseParseError",
    "RetryController",
    "RunAborted",
    "RunResult",
    "ServiceFault",
    "ServiceQuotaExhausted",
    "TexOCRError",
    "UsageTracker",
    "build_preamble",
    "build_window",
    "determine_start_page",
    "find_page_units",
    "validate_config",
]
