# tests/unit/rag/test_unit_embedders.py - v1
"""Embedder batching, shape checks and provider adapters (fake SDKs)."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from plexweave.rag.embeddings.base_embedder import EmbeddingShapeError
from plexweave.rag.embeddings.ollama_embedder import OllamaEmbedder
from plexweave.rag.embeddings.openai_embedder import OpenAIEmbedder
from tests.conftest import HashEmbedder


class TestBatching:
    @pytest.mark.asyncio
    async def test_splits_into_batches(self):
        embedder = HashEmbedder(dimensions=8)
        embedder.batch_size = 3
        calls: list[int] = []
        original = embedder._embed_batch

        async def counting(texts):
            calls.append(len(texts))
            return await original(texts)

        embedder._embed_batch = counting
        vectors = await embedder.embed_texts([f"text {i}" for i in range(7)])

        assert calls == [3, 3, 1]
        assert len(vectors) == 7
        assert all(len(v) == 8 for v in vectors)

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_call(self):
        embedder = HashEmbedder()
        assert await embedder.embed_texts([]) == []
        assert embedder.call_count == 0

    @pytest.mark.asyncio
    async def test_query_is_single_text(self):
        embedder = HashEmbedder(dimensions=16)
        vector = await embedder.embed_query("parse tokens")
        assert vector == (await embedder.embed_texts(["parse tokens"]))[0]


class TestShapeChecks:
    @pytest.mark.asyncio
    async def test_missing_vector(self):
        embedder = HashEmbedder(dimensions=4)
        embedder._embed_batch = AsyncMock(return_value=[[0.0] * 4])
        with pytest.raises(EmbeddingShapeError, match="1 vectors for 2 inputs"):
            await embedder.embed_texts(["a", "b"])

    @pytest.mark.asyncio
    async def test_wrong_width(self):
        embedder = HashEmbedder(dimensions=4)
        embedder._embed_batch = AsyncMock(return_value=[[0.0] * 3])
        with pytest.raises(EmbeddingShapeError, match="3-wide"):
            await embedder.embed_texts(["a"])


class TestOpenAIEmbedder:
    @pytest.mark.asyncio
    async def test_orders_by_index(self):
        embedder = OpenAIEmbedder(api_key="k", dimensions=2)
        fake = MagicMock()
        fake.embeddings.create = AsyncMock(return_value=SimpleNamespace(data=[
            SimpleNamespace(index=1, embedding=[0.0, 1.0]),
            SimpleNamespace(index=0, embedding=[1.0, 0.0]),
        ]))
        embedder._OpenAIEmbedder__client = fake

        vectors = await embedder.embed_texts(["first", "second"])

        assert vectors == [[1.0, 0.0], [0.0, 1.0]]
        request = fake.embeddings.create.await_args.kwargs
        assert request["dimensions"] == 2
        assert request["model"] == "text-embedding-3-small"


class TestOllamaEmbedder:
    @pytest.mark.asyncio
    async def test_embed_call(self):
        embedder = OllamaEmbedder(dimensions=3)
        fake = MagicMock()
        fake.embed = AsyncMock(return_value={"embeddings": [[0.1, 0.2, 0.3]]})
        embedder._OllamaEmbedder__client = fake

        assert await embedder.embed_query("hello") == [0.1, 0.2, 0.3]
        fake.embed.assert_awaited_once_with(model="nomic-embed-text", input=["hello"])
