"""
Usage Tracker Module

Tracks Gemini token usage and estimated cost for one pipeline run.
"""

from dataclasses import dataclass, field


# Pricing per 1M tokens (update as needed)
PRICING = {
    "gemini-2.5-flash": {
        "input": 0.30,
        "output": 2.50,
    },
    "gemini-2.5-pro": {
        "input": 1.25,
        "output": 10.00,
    },
    "gemini-2.0-flash": {
        "input": 0.10,
        "output": 0.40,
    },
    "default": {
        "input": 0.30,
        "output": 2.50,
    }
}


@dataclass
class PageUsage:
    """Record of the recognition call that produced one page."""
    page_index: int
    model: str
    input_tokens: int
    output_tokens: int
    duration_ms: float
    cost: float


@dataclass
class UsageTracker:
    """Accumulates token usage and cost across pages."""

    calls: list[PageUsage] = field(default_factory=list)

    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cost: float = 0.0
    total_duration_ms: float = 0.0

    @property
    def total_tokens(self) -> int:
        return self.total_input_tokens + self.total_output_tokens

    def add_call(
        self,
        page_index: int,
        model: str,
        input_tokens: int,
        output_tokens: int,
        duration_ms: float
    ) -> PageUsage:
        """Record a recognition call."""
        pricing = PRICING.get(model, PRICING["default"])
        cost = (input_tokens / 1_000_000) * pricing["input"] + (output_tokens / 1_000_000) * pricing["output"]

        call = PageUsage(
            page_index=page_index,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            duration_ms=duration_ms,
            cost=cost,
        )
        self.calls.append(call)

        self.total_input_tokens += input_tokens
        self.total_output_tokens += output_tokens
        self.total_cost += cost
        self.total_duration_ms += duration_ms
        return call

    def format_summary(self) -> str:
        """Format a human-readable summary."""
        lines = [
            f"Pages: {len(self.calls)}",
            f"Tokens: {self.total_tokens:,} ({self.total_input_tokens:,} in + {self.total_output_tokens:,} out)",
            f"Cost: ${self.total_cost:.4f}",
            f"API time: {self.total_duration_ms / 1000:.1f}s",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Export as dictionary for JSON serialization."""
        return {
            "total_input_tokens": self.total_input_tokens,
            "total_output_tokens": self.total_output_tokens,
            "total_tokens": self.total_tokens,
            "total_cost_usd": round(self.total_cost, 6),
            "total_duration_ms": round(self.total_duration_ms, 2),
            "pages": [
                {
                    "page": c.page_index,
                    "model": c.model,
                    "input_tokens": c.input_tokens,
                    "output_tokens": c.output_tokens,
                    "cost_usd": round(c.cost, 6),
                    "duration_ms": round(c.duration_ms, 2),
                }
                for c in self.calls
            ],
        }


def extract_usage_from_response(response) -> tuple[int, int]:
    """Extract token usage from a Gemini response, (0, 0) when absent."""
    usage = getattr(response, "usage_metadata", None)
    if usage is None:
        return (0, 0)
    return (
        getattr(usage, "prompt_token_count", 0) or 0,
        getattr(usage, "candidates_token_count", 0) or 0,
    )
