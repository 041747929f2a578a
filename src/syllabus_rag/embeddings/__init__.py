"""
Embeddings Package

Provides the embedding capability, the in-memory vector store and the
embed-and-store helper used by content ingestion.
"""

from .embedder import EmbeddingProvider, EmbeddingProviderError, OpenAIEmbeddingProvider
from .models import EmbeddingVector, VectorFilter, VectorMetadata, VectorSearchResult
from .vector_store import DimensionMismatchError, InMemoryVectorStore, cosine_similarity
from .indexer import IndexItem, embed_and_store

__all__ = [
    "EmbeddingProvider",
    "EmbeddingProviderError",
    "OpenAIEmbeddingProvider",
    "EmbeddingVector",
    "VectorFilter",
    "VectorMetadata",
    "VectorSearchResult",
    "DimensionMismatchError",
    "InMemoryVectorStore",
    "cosine_similarity",
    "IndexItem",
    "embed_and_store",
]
