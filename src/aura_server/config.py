from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    openai_api_key: SecretStr

    # Completion service (OpenAI-compatible chat completions endpoint)
    llm_base_url: str = "https://openrouter.ai/api/v1"
    llm_model: str = "openai/gpt-3.5-turbo"
    llm_temperature: float = 0.7
    llm_timeout: float = 60.0

    # Embeddings (falls back to openai_api_key when unset)
    embedding_api_key: Optional[SecretStr] = None
    embedding_base_url: str = "https://api.openai.com/v1/embeddings"
    embedding_model: str = "text-embedding-3-small"

    # Knowledge sources
    policy_docs_dir: str = "backend/jsons"
    guide_document_id: str = "community_guide"
    knowledge_text_dir: str = "backend/texts"
    vector_index_path: str = "data/faiss_index.bin"
    vector_meta_path: str = "data/index_meta.json"
    reference_data_dir: Optional[str] = None  # None -> packaged tables

    # Admission control: 25 requests per minute per client
    rate_limit_requests: int = 25
    rate_limit_window_ms: int = 60_000
    rate_limit_cleanup_interval: float = 300.0

    # Retrieval tuning
    semantic_top_k: int = 6
    semantic_min_score: float = 0.08
    keyword_fallback_limit: int = 6
    retrieval_timeout: float = 10.0
    max_document_chars: int = 3000
    max_chunk_chars: int = 1500

    # Inbound request bounds
    max_message_chars: int = 2000
    max_history_messages: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
