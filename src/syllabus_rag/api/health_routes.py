from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from .dependencies import get_embedding_provider
from .models import HealthResponse
from ..embeddings.embedder import EmbeddingProvider

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(
    provider: Annotated[Optional[EmbeddingProvider], Depends(get_embedding_provider)],
) -> HealthResponse:
    return HealthResponse(status="ok", embeddings_enabled=provider is not None)
