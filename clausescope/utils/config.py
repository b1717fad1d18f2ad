from __future__ import annotations
import os
from dataclasses import dataclass
from dotenv import load_dotenv

@dataclass(frozen=True)
class AppConfig:
    use_gemini: bool = True
    gemini_model: str = "gemini-1.5-flash"
    embed_provider: str = "huggingface"  # huggingface | gemini | hashing
    embed_model: str = "intfloat/e5-small-v2"
    local_llm_model: str = "Qwen/Qwen2.5-7B-Instruct"
    max_tokens: int = 2048
    temperature: float = 0.3
    router_temperature: float = 0.2
    workspace_dir: str = "workspace_tmp"
    index_name: str = "clause_index"
    max_clauses: int = 10
    classify_concurrency: int = 4
    doc_char_budget: int = 3000
    fetch_timeout: float = 10.0
    min_clause_chars: int = 50
    max_text_chars: int = 100_000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        load_dotenv()
        return cls(
            use_gemini=os.getenv("USE_GEMINI", "true").lower() == "true",
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-1.5-flash"),
            embed_provider=os.getenv("EMBED_PROVIDER", "huggingface").lower(),
            embed_model=os.getenv("EMBED_MODEL", "intfloat/e5-small-v2"),
            local_llm_model=os.getenv("LOCAL_LLM_MODEL", "Qwen/Qwen2.5-7B-Instruct"),
            max_tokens=int(os.getenv("MAX_TOKENS", "2048")),
            temperature=float(os.getenv("TEMPERATURE", "0.3")),
            router_temperature=float(os.getenv("ROUTER_TEMPERATURE", "0.2")),
            workspace_dir=os.getenv("WORKSPACE_DIR", "workspace_tmp"),
            index_name=os.getenv("INDEX_NAME", "clause_index"),
            max_clauses=int(os.getenv("MAX_CLAUSES", "10")),
            classify_concurrency=int(os.getenv("CLASSIFY_CONCURRENCY", "4")),
            doc_char_budget=int(os.getenv("DOC_CHAR_BUDGET", "3000")),
            fetch_timeout=float(os.getenv("FETCH_TIMEOUT", "10")),
            min_clause_chars=int(os.getenv("MIN_CLAUSE_CHARS", "50")),
            max_text_chars=int(os.getenv("MAX_TEXT_CHARS", "100000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
