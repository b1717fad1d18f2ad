import asyncio
import json
import pytest
from clausescope.utils.config import AppConfig
from clausescope.embeddings.embeddings import HashingEmbedding

CLASSIFY = {"category": "other", "riskLevel": "LOW", "plainEnglish": "Standard clause.", "concerns": []}
RISKS = {"detectedRisks": [], "overallRiskScore": 10, "redFlags": []}
TRANSLATE = {"simple": "Plain version.", "whatItMeans": "Nothing unusual.", "risks": [], "summary": "Fine."}
ANSWER = {"answer": "Stub answer.", "sourceText": "", "conditions": []}
DOCUMENT = {"riskySections": [], "fairSections": [], "summary": "Looks standard."}

# Substrings that identify each prompt template.
MARKERS = [
    ("router", "Available functions"),
    ("classify", "primary category"),
    ("risks", "consumer-unfriendly practices"),
    ("translate", "legal translator"),
    ("answer", "QUESTION:"),
    ("document", "DOCUMENT:"),
]


class StubLLM:
    """Async generation stub returning canned replies keyed by prompt kind.

    A reply may be a dict (sent as JSON), a raw string, or a callable taking
    the prompt.
    """

    def __init__(self, delay: float = 0.0, **replies):
        self.replies = {
            "classify": CLASSIFY,
            "risks": RISKS,
            "translate": TRANSLATE,
            "answer": ANSWER,
            "document": DOCUMENT,
            "router": "I can only help with terms of service questions.",
        }
        self.replies.update(replies)
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0

    def kind(self, prompt: str) -> str:
        for name, marker in MARKERS:
            if marker in prompt:
                return name
        raise AssertionError(f"unrecognized prompt: {prompt[:80]}")

    async def generate(self, prompt, temperature=None, json_mode=False):
        kind = self.kind(prompt)
        self.calls.append((kind, prompt, temperature))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.active -= 1
        reply = self.replies[kind]
        if callable(reply):
            reply = reply(prompt)
        return reply if isinstance(reply, str) else json.dumps(reply)

    def count(self, kind: str) -> int:
        return sum(1 for k, _, _ in self.calls if k == kind)


@pytest.fixture
def config(tmp_path):
    return AppConfig(use_gemini=False, embed_provider="hashing", workspace_dir=str(tmp_path))


@pytest.fixture
def embeddings():
    return HashingEmbedding(dim=256)
