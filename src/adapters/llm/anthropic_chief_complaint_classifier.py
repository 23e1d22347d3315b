from __future__ import annotations

from dataclasses import dataclass, field

import anthropic

from src.adapters.env import env_float, env_str
from src.app.ports.output import IChiefComplaintClassifier
from src.domain.exceptions import ConfigurationError, UpstreamOtherError

DEFAULT_MODEL = "claude-haiku-4-5"

SYSTEM_PROMPT = """You triage emergency medical dispatch calls.

Given the summary of a call, reply with the chief complaint only: a short
clinical phrase of at most six words (for example "Chest Pain" or
"Fall • Head Injury"). No punctuation at the end, no explanations."""


@dataclass(slots=True)
class AnthropicChiefComplaintClassifier(IChiefComplaintClassifier):
    """Names the chief complaint of a call summary with a Claude model.

    Env vars:
      - ANTHROPIC_API_KEY (required)
      - CLASSIFIER_MODEL (default claude-haiku-4-5)
      - CLASSIFIER_TIMEOUT_S (default 10)
    """

    api_key: str | None = None
    model: str | None = None
    timeout_s: float = 10.0
    max_tokens: int = 32
    _client: anthropic.AsyncAnthropic | None = field(
        default=None, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.api_key is None:
            self.api_key = env_str("ANTHROPIC_API_KEY")
        if self.model is None:
            self.model = env_str("CLASSIFIER_MODEL", DEFAULT_MODEL)
        self.timeout_s = env_float("CLASSIFIER_TIMEOUT_S", self.timeout_s)

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if not self.api_key:
            raise ConfigurationError("Missing ANTHROPIC_API_KEY")
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self.api_key, timeout=self.timeout_s, max_retries=0
            )
        return self._client

    async def classify(self, summary: str) -> str:
        client = self._get_client()
        response = await client.messages.create(
            model=self.model or DEFAULT_MODEL,
            max_tokens=self.max_tokens,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": summary}],
        )

        text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        complaint = text.strip().strip("\"'").rstrip(".").strip()
        if not complaint:
            raise UpstreamOtherError("Classifier returned an empty answer")
        return complaint
