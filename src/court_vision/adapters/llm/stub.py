"""Stub LLM provider for testing."""

import json
import random

from court_vision.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from court_vision.logging import get_logger

logger = get_logger(__name__)


def _pct(rng: random.Random, low: int, high: int) -> str:
    return f"{rng.randint(low, high)}%"


class StubLLMProvider(LLMProvider):
    """Stub provider that returns mock LLM responses for testing.

    Summary prompts get a schema-shaped JSON object wrapped in a line of
    prose, the way chat models tend to answer. Numbers are random so the
    output varies between calls; pass `seed` for repeatable output.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self.calls: list[list[LLMMessage]] = []

    @property
    def name(self) -> str:
        return "stub"

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,  # noqa: ARG002
        max_tokens: int = 4096,  # noqa: ARG002
        json_mode: bool = False,
    ) -> LLMResponse:
        """Return a mock completion response."""
        self.calls.append(list(messages))
        logger.info(
            "stub_llm_complete",
            message_count=len(messages),
            json_mode=json_mode,
        )

        user_message = ""
        for msg in reversed(messages):
            if msg.role == "user":
                user_message = msg.content
                break

        if "shotZones" in user_message:
            body = json.dumps(self._summary(), indent=2)
            if json_mode:
                content = body
            else:
                content = f"Here is the analysis:\n{body}\nLet me know if you need more."
        else:
            content = f"This is a stub response for: {user_message[:100]}"

        return LLMResponse(
            content=content,
            model="stub-model",
            usage={
                "prompt_tokens": len(user_message.split()),
                "completion_tokens": len(content.split()),
                "total_tokens": len(user_message.split()) + len(content.split()),
            },
            finish_reason="stop",
        )

    def _summary(self) -> dict[str, object]:
        rng = self._rng
        left = rng.randint(20, 60)
        pass_rate = rng.randint(30, 70)
        drive_rate = rng.randint(30, 70)
        return {
            "shotZones": {
                "rim": _pct(rng, 20, 45),
                "shortMid": _pct(rng, 5, 20),
                "longMid": _pct(rng, 5, 20),
                "corners": _pct(rng, 5, 20),
                "aboveBreak": _pct(rng, 10, 35),
            },
            "playStyle": {
                "passVsShoot": f"{pass_rate}% / {100 - pass_rate}%",
                "driveVsPullUp": f"{drive_rate}% / {100 - drive_rate}%",
            },
            "defense": {
                "avgDefDistance": f"{rng.uniform(2.0, 6.0):.1f} ft",
                "blowByRate": _pct(rng, 10, 40),
                "helpGapFrequency": _pct(rng, 10, 50),
            },
            "rimTendencies": {
                "finishRate": _pct(rng, 40, 75),
                "kickOutRate": _pct(rng, 10, 40),
                "vsTallerDefenders": _pct(rng, 25, 60),
                "foulDrawRate": _pct(rng, 5, 30),
            },
            "hotSpots": rng.sample(
                ["left corner", "right corner", "top of key", "left wing", "right wing", "paint"],
                k=2,
            ),
            "handDominance": {"left": f"{left}%", "right": f"{100 - left}%"},
        }
