from __future__ import annotations
import asyncio
from functools import lru_cache
from typing import Optional
from clausescope.utils.config import AppConfig
from clausescope.utils.exception import ExternalServiceError
from clausescope.utils.logger import get_logger

logger = get_logger(__name__)

LIGHTWEIGHT_DEFAULT = "distilgpt2"  # small CPU friendly model


@lru_cache(maxsize=1)
def _get_pipe(model_name: str):  # pragma: no cover - heavy
    try:
        import torch
        from transformers import AutoModelForCausalLM, AutoTokenizer, pipeline
    except ImportError as e:
        raise ExternalServiceError(
            "Local generation needs transformers and torch (pip install 'clausescope[local]')"
        ) from e
    tokenizer = AutoTokenizer.from_pretrained(model_name, trust_remote_code=True)
    model = AutoModelForCausalLM.from_pretrained(
        model_name,
        torch_dtype=torch.float16 if torch.cuda.is_available() else torch.float32,
        device_map="auto" if torch.cuda.is_available() else None,
    )
    logger.info("Loaded local generation model %s", model_name)
    return pipeline("text-generation", model=model, tokenizer=tokenizer)


class LocalLLM:
    """Local Hugging Face causal LM used when Gemini is switched off.

    The pipeline is blocking, so each call runs in a worker thread.
    """

    def __init__(self, config: AppConfig, model_name: Optional[str] = None):
        self.temperature = config.temperature
        self.max_tokens = config.max_tokens
        self.model_name = model_name or config.local_llm_model or LIGHTWEIGHT_DEFAULT
        self.pipe = _get_pipe(self.model_name)

    def _run(self, prompt: str, temperature: float) -> str:  # pragma: no cover - heavy
        out = self.pipe(
            prompt,
            max_new_tokens=min(self.max_tokens, 512),
            do_sample=temperature > 0,
            temperature=temperature if temperature > 0 else None,
            num_return_sequences=1,
            pad_token_id=getattr(self.pipe.tokenizer, "eos_token_id", None),
        )
        text = out[0]["generated_text"]
        return text[len(prompt):].strip() if text.startswith(prompt) else text

    async def generate(self, prompt: str, temperature: Optional[float] = None, json_mode: bool = False) -> str:
        temp = self.temperature if temperature is None else temperature
        try:
            return await asyncio.to_thread(self._run, prompt, temp)
        except (RuntimeError, ValueError) as e:  # pragma: no cover - heavy
            raise ExternalServiceError(f"Local generation failed: {e}") from e
