from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Embeddings (empty key disables the semantic path entirely)
    openai_api_key: SecretStr = SecretStr("")
    embedding_model: str = "text-embedding-3-small"
    embedding_base_url: str = "https://api.openai.com/v1/embeddings"
    embedding_timeout_seconds: float = 30.0

    # Syllabus / content persistence. None keeps everything in memory.
    data_root_path: Optional[str] = None

    # RAG pipeline defaults
    rag_max_sources: int = 5
    rag_min_score: float = 0.5
    rag_reject_out_of_scope: bool = True

    default_chunk_size: int = 500

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @property
    def embeddings_enabled(self) -> bool:
        return bool(self.openai_api_key.get_secret_value())


settings = Settings()
