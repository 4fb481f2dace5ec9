"""
Recognition Client Module
Uses Gemini vision to transcribe one page (with its neighbours as context) into LaTeX.
"""

import json
import time
from dataclasses import dataclass
from typing import Optional, TypedDict

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.generativeai.types import (
    BlockedPromptException,
    HarmBlockThreshold,
    HarmCategory,
    StopCandidateException,
)

from .errors import ConfigurationError, ResponseParseError, ServiceFault, ServiceQuotaExhausted
from .usage import extract_usage_from_response
from .window import ContextWindow


TRANSCRIPTION_PROMPT = """You are an experienced scholarly editor and OCR specialist for historical printed documents, including blackletter (Fraktur) typefaces.

## Your Task:
- Transcribe ONLY the image marked as the TARGET page. The previous and next pages, when present, are context so that words and sentences split across page breaks are recognized correctly. Never transcribe text that belongs to them.
- Answer with a well-formed, semantically sensible LaTeX FRAGMENT that reproduces exactly the target page. No complete document: no preamble, no \\documentclass, no \\begin{document} or \\end{document}.

## Structure:
- Use sensible paragraphs, headings, lists and emphasis. Use \\section, \\subsection, \\textbf, \\emph, itemize, enumerate, quote and \\footnote wherever the original clearly shows them.

## Text Normalization:
- Gently correct obvious historical spellings (e.g. 'daß' -> 'dass', 'Thun' -> 'tun') but keep the historical character of the text.
- Always write umlauts and other diacritics as real characters (ä, ö, ü), never as 'a, "a or ae.
- Remove scanning artifacts, duplicated text, line-break hyphenation in the middle of words and other optical errors.

## Uncertainty:
- If you are unsure about formatting, put a LaTeX comment such as % TODO: check formatting at that spot instead of guessing silently.

## Output:
- Add no interpretation, no meta commentary and no content that is not on the page.
- Return JSON of the form {"content": "<latex fragment>"}.
"""

IMAGE_LABELS = {
    "previous": "Previous page (context only, do not transcribe):",
    "current": "TARGET page (transcribe this page):",
    "next": "Next page (context only, do not transcribe):",
}

# Historical texts trip the default filters far too often
SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
}


class OCRResponse(TypedDict):
    content: str


@dataclass
class Recognition:
    """Result of a single recognition call."""
    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    duration_ms: float = 0.0


class GeminiRecognizer:
    """Transcribes a context window with a Gemini vision model."""

    def __init__(self, api_key: str = "", model_name: str = "gemini-2.5-flash", timeout: float = 300):
        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout
        self._model = None

    def _get_model(self):
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not set")
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    def build_contents(self, window: ContextWindow) -> list:
        """Interleave a label before each image, then the instructions."""
        slots = [("previous", window.previous), ("current", window.current), ("next", window.next)]
        contents = []
        for slot, image in slots:
            if image is None:
                continue
            contents.append(IMAGE_LABELS[slot])
            contents.append({"mime_type": "image/png", "data": image})
        contents.append(TRANSCRIPTION_PROMPT)
        return contents

    def recognize(self, window: ContextWindow) -> Recognition:
        """
        Transcribe the target page of a context window.

        Args:
            window: Context window with the target page and its neighbours

        Returns:
            Recognition with the LaTeX fragment and token usage

        Raises:
            ConfigurationError: no API key configured
            ServiceQuotaExhausted: the API is rate limited
            ServiceFault: the request failed
            ResponseParseError: the answer had no usable content field
        """
        model = self._get_model()
        contents = self.build_contents(window)

        start_time = time.time()
        try:
            response = model.generate_content(
                contents,
                generation_config={
                    "temperature": 0.0,
                    "response_mime_type": "application/json",
                    "response_schema": OCRResponse,
                },
                safety_settings=SAFETY_SETTINGS,
                request_options={"timeout": self.timeout},
            )
        except google_exceptions.TooManyRequests as e:
            # ResourceExhausted over gRPC, a plain 429 over REST
            raise ServiceQuotaExhausted(str(e), retry_after=retry_delay_from_error(e)) from e
        except (google_exceptions.GoogleAPIError, BlockedPromptException, StopCandidateException) as e:
            raise ServiceFault(f"Gemini request failed: {e}") from e
        duration_ms = (time.time() - start_time) * 1000

        try:
            response_text = response.text
        except ValueError as e:
            # Raised by the SDK when the candidate carries no text parts
            raise ResponseParseError(f"Response contained no text: {e}") from e

        content = parse_content(response_text)
        input_tokens, output_tokens = extract_usage_from_response(response)

        return Recognition(
            content=content,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            duration_ms=duration_ms,
        )


def parse_content(response_text) -> str:
    """Pull the ``content`` string out of a JSON answer."""
    if not isinstance(response_text, str):
        raise ResponseParseError("Response was not a string", raw_response=repr(response_text))

    text = response_text.strip()

    # Remove markdown code blocks if present
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Response is not valid JSON: {e}", raw_response=response_text) from e

    if not isinstance(data, dict) or not isinstance(data.get("content"), str):
        raise ResponseParseError("Response has no string 'content' field", raw_response=response_text)

    return data["content"]


def retry_delay_from_error(error: google_exceptions.GoogleAPICallError) -> Optional[float]:
    """
    Read the suggested wait from a RetryInfo error detail.

    gRPC errors carry parsed protobuf messages with a ``retry_delay``
    Duration; REST errors carry dicts with a ``retryDelay`` string like "20s".
    """
    for detail in getattr(error, "details", None) or []:
        if isinstance(detail, dict):
            value = detail.get("retryDelay") or detail.get("retry_delay")
            if value:
                return _parse_duration(value)
            continue

        delay = getattr(detail, "retry_delay", None)
        if delay is not None:
            return delay.seconds + delay.nanos / 1e9

    return None


def _parse_duration(value) -> Optional[float]:
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().rstrip("s"))
    except ValueError:
        return None
