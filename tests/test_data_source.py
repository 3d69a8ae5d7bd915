import pytest
from unittest.mock import AsyncMock
from pydantic import SecretStr

from search_bot.config import SearchServiceConfig
from search_bot.core.errors import ConfigurationError, RetrievalError
from search_bot.embeddings.embedder import Embedder
from search_bot.search.client import SearchClient
from search_bot.search.data_source import (
    AzureSearchDataSource,
    NO_INPUT_MESSAGE,
    NO_RESULTS_MESSAGE,
)
from search_bot.search.formatting import format_document
from search_bot.search.models import SearchDocument, SearchHit, SearchMode


def _hit(doc_id, words, uri=None):
    return SearchHit(
        document=SearchDocument(
            id=doc_id,
            title=f"doc{doc_id}.txt",
            source_uri=uri,
            content=" ".join(["word"] * words),
        ),
        score=1.0,
    )


def _cost(tokenizer, hit):
    return len(tokenizer.encode(format_document(hit.document)))


@pytest.fixture
def mock_client():
    client = AsyncMock(spec=SearchClient)
    client.search.return_value = []
    return client


@pytest.fixture
def mock_embedder():
    embedder = AsyncMock(spec=Embedder)
    embedder.embed.return_value = [0.1, 0.2, 0.3]
    return embedder


def _source(config, client, **kwargs):
    return AzureSearchDataSource(config, client=client, **kwargs)


# ---------------------------------------------------------------------
# Short-circuits
# ---------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   "])
async def test_empty_query_makes_no_search_call(search_config, mock_client, tokenizer, query):
    source = _source(search_config, mock_client)

    rendered = await source.render_context(query, 100, tokenizer)

    assert rendered.text == NO_INPUT_MESSAGE
    assert rendered.token_count == 0
    assert rendered.truncated is False
    mock_client.search.assert_not_called()


@pytest.mark.asyncio
async def test_zero_results_returns_explanatory_text(search_config, mock_client, tokenizer):
    source = _source(search_config, mock_client)

    rendered = await source.render_context("vacation", 100, tokenizer)

    assert rendered.text == NO_RESULTS_MESSAGE
    assert rendered.token_count == 0
    assert rendered.truncated is False
    mock_client.search.assert_awaited_once()


# ---------------------------------------------------------------------
# Token budget
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_all_documents_fit(search_config, mock_client, tokenizer):
    hits = [_hit("1", 3, uri="https://example.com/1"), _hit("2", 3)]
    mock_client.search.return_value = hits
    source = _source(search_config, mock_client)

    rendered = await source.render_context("word", 1000, tokenizer)

    assert rendered.truncated is False
    assert rendered.text == format_document(hits[0].document) + format_document(hits[1].document)
    assert rendered.token_count == _cost(tokenizer, hits[0]) + _cost(tokenizer, hits[1])


@pytest.mark.asyncio
async def test_truncates_when_budget_is_exceeded(search_config, mock_client, tokenizer):
    hits = [_hit("1", 5), _hit("2", 5), _hit("3", 5)]
    cost = _cost(tokenizer, hits[0])
    mock_client.search.return_value = hits
    source = _source(search_config, mock_client)

    rendered = await source.render_context("word", 2 * cost + 1, tokenizer)

    assert rendered.truncated is True
    assert rendered.token_count == 2 * cost
    assert "doc1.txt" in rendered.text
    assert "doc2.txt" in rendered.text
    assert "doc3.txt" not in rendered.text


@pytest.mark.asyncio
async def test_truncation_is_greedy_not_best_fit(search_config, mock_client, tokenizer):
    small, big, small_again = _hit("1", 2), _hit("2", 50), _hit("3", 2)
    mock_client.search.return_value = [small, big, small_again]
    budget = _cost(tokenizer, small) + _cost(tokenizer, small_again)
    source = _source(search_config, mock_client)

    rendered = await source.render_context("word", budget, tokenizer)

    assert rendered.truncated is True
    assert rendered.text == format_document(small.document)


@pytest.mark.asyncio
async def test_oversized_first_document_is_skipped_and_flagged(search_config, mock_client, tokenizer):
    mock_client.search.return_value = [_hit("1", 100), _hit("2", 1)]
    source = _source(search_config, mock_client)

    rendered = await source.render_context("word", 10, tokenizer)

    assert rendered.text == ""
    assert rendered.token_count == 0
    assert rendered.truncated is True


@pytest.mark.asyncio
async def test_token_count_never_exceeds_budget(search_config, mock_client, tokenizer):
    mock_client.search.return_value = [_hit(str(i), i * 3) for i in range(1, 6)]
    source = _source(search_config, mock_client)

    for budget in range(0, 120, 7):
        rendered = await source.render_context("word", budget, tokenizer)
        assert rendered.token_count <= budget
        assert len(tokenizer.encode(rendered.text)) == rendered.token_count


# ---------------------------------------------------------------------
# Query modes
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_keyword_payload(search_config, mock_client, tokenizer):
    source = _source(search_config, mock_client, mode=SearchMode.KEYWORD)

    await source.render_context("holiday", 100, tokenizer)

    payload = mock_client.search.await_args.args[0]
    assert payload["search"] == "holiday"
    assert payload["queryType"] == "simple"
    assert payload["select"] == "id,metadata_spo_item_name,metadata_spo_item_weburi,content"
    assert "vectorQueries" not in payload


@pytest.mark.asyncio
async def test_semantic_payload_names_configuration(search_config, mock_client, tokenizer):
    source = _source(search_config, mock_client, mode=SearchMode.SEMANTIC, top=5)

    await source.render_context("holiday", 100, tokenizer)

    payload = mock_client.search.await_args.args[0]
    assert payload["queryType"] == "semantic"
    assert payload["semanticConfiguration"] == "my-semantic-config-default"
    assert payload["top"] == 5


@pytest.mark.asyncio
async def test_vector_payload_embeds_query(search_config, mock_client, mock_embedder, tokenizer):
    source = _source(
        search_config,
        mock_client,
        mode=SearchMode.VECTOR,
        embedder=mock_embedder,
        vector_k=3,
    )

    await source.render_context("holiday", 100, tokenizer)

    mock_embedder.embed.assert_awaited_once_with("holiday")
    payload = mock_client.search.await_args.args[0]
    assert "search" not in payload
    assert payload["vectorQueries"] == [
        {"kind": "vector", "vector": [0.1, 0.2, 0.3], "fields": "content_vector", "k": 3}
    ]


@pytest.mark.asyncio
async def test_vector_mode_accepts_precomputed_vector(search_config, mock_client, mock_embedder, tokenizer):
    source = _source(search_config, mock_client, mode=SearchMode.VECTOR, embedder=mock_embedder)

    await source.render_context("holiday", 100, tokenizer, query_vector=[1.0, 0.0])

    mock_embedder.embed.assert_not_called()
    payload = mock_client.search.await_args.args[0]
    assert payload["vectorQueries"][0]["vector"] == [1.0, 0.0]
    assert payload["vectorQueries"][0]["k"] == 2


@pytest.mark.asyncio
async def test_hybrid_payload_restricts_search_fields(search_config, mock_client, mock_embedder, tokenizer):
    source = _source(search_config, mock_client, mode=SearchMode.HYBRID, embedder=mock_embedder)

    await source.render_context("holiday", 100, tokenizer)

    payload = mock_client.search.await_args.args[0]
    assert payload["search"] == "holiday"
    assert payload["searchFields"] == "metadata_spo_item_name,content,metadata_spo_item_title"
    assert len(payload["vectorQueries"]) == 1


@pytest.mark.asyncio
async def test_hybrid_without_embedder_is_text_only(search_config, mock_client, tokenizer):
    source = _source(search_config, mock_client, mode=SearchMode.HYBRID)

    await source.render_context("holiday", 100, tokenizer)

    payload = mock_client.search.await_args.args[0]
    assert "vectorQueries" not in payload


@pytest.mark.asyncio
async def test_render_data_reads_turn_input(search_config, mock_client, tokenizer):
    mock_client.search.return_value = [_hit("1", 2)]
    source = _source(search_config, mock_client)

    rendered = await source.render_data({"input": "word"}, tokenizer, 100)

    assert "doc1.txt" in rendered.text
    assert mock_client.search.await_args.args[0]["search"] == "word"


# ---------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------

def test_missing_configuration_fails_at_construction():
    config = SearchServiceConfig(endpoint="", api_key=SecretStr(""), index_name="idx")

    with pytest.raises(ConfigurationError) as exc_info:
        AzureSearchDataSource(config)

    assert "AZURE_SEARCH_ENDPOINT" in exc_info.value.missing
    assert "SECRET_AZURE_SEARCH_KEY" in exc_info.value.missing


def test_semantic_mode_requires_configuration_name(mock_client):
    config = SearchServiceConfig(
        endpoint="https://x.search.windows.net",
        api_key=SecretStr("k"),
        index_name="idx",
        semantic_configuration=None,
    )

    with pytest.raises(ConfigurationError):
        AzureSearchDataSource(config, client=mock_client, mode=SearchMode.SEMANTIC)


def test_vector_mode_requires_embedder(search_config, mock_client):
    with pytest.raises(ConfigurationError):
        AzureSearchDataSource(search_config, client=mock_client, mode=SearchMode.VECTOR)


@pytest.mark.asyncio
async def test_search_failure_propagates(search_config, mock_client, tokenizer):
    mock_client.search.side_effect = RetrievalError("boom", status_code=503)
    source = _source(search_config, mock_client)

    with pytest.raises(RetrievalError):
        await source.render_context("holiday", 100, tokenizer)

    mock_client.search.assert_awaited_once()


def test_selection_without_key_field_is_rejected(search_config, mock_client):
    with pytest.raises(ValueError, match="id"):
        AzureSearchDataSource(
            search_config,
            client=mock_client,
            selected_fields=["content", "metadata_spo_item_name"],
        )


@pytest.mark.asyncio
async def test_semantic_payload_carries_query_language(mock_client, tokenizer):
    config = SearchServiceConfig(
        endpoint="https://x.search.windows.net",
        api_key=SecretStr("k"),
        index_name="idx",
        query_language="en-us",
    )
    source = _source(config, mock_client, mode=SearchMode.SEMANTIC)

    await source.render_context("holiday", 100, tokenizer)

    payload = mock_client.search.await_args.args[0]
    assert payload["queryLanguage"] == "en-us"


@pytest.mark.asyncio
async def test_semantic_payload_omits_query_language_by_default(search_config, mock_client, tokenizer):
    source = _source(search_config, mock_client, mode=SearchMode.SEMANTIC)

    await source.render_context("holiday", 100, tokenizer)

    assert "queryLanguage" not in mock_client.search.await_args.args[0]
