import json
from typing import Dict, List

import httpx
import pytest
from pydantic import SecretStr

from search_bot.config import ChatModelConfig, EmbeddingConfig, SearchServiceConfig


class WordTokenizer:
    """Counts one token per whitespace-separated word."""

    def encode(self, text):
        return text.split()


class FakeSearchService:
    """
    In-memory stand-in for the search REST API.

    The "ranker" returns documents whose content contains the search text
    (case-insensitive), ordered by id.
    """

    def __init__(self):
        self.indexes: Dict[str, dict] = {}
        self.documents: Dict[str, Dict[str, dict]] = {}
        self.requests: List[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def count(self, method: str, path: str) -> int:
        return sum(
            1 for r in self.requests if r.method == method and r.url.path == path
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")

        if parts[0] != "indexes" or len(parts) < 2:
            return httpx.Response(400)

        name = parts[1]

        if len(parts) == 2:
            if request.method == "GET":
                if name not in self.indexes:
                    return httpx.Response(404, json={"error": {"message": "not found"}})
                return httpx.Response(200, json=self.indexes[name])
            if request.method == "PUT":
                schema = json.loads(request.content)
                self.indexes[name] = schema
                self.documents.setdefault(name, {})
                return httpx.Response(201, json=schema)
            if request.method == "DELETE":
                if name not in self.indexes:
                    return httpx.Response(404)
                del self.indexes[name]
                self.documents.pop(name, None)
                return httpx.Response(204)

        if name not in self.indexes:
            return httpx.Response(404)

        docs = self.documents[name]
        body = json.loads(request.content)

        if parts[2:] == ["docs", "index"]:
            results = []
            for action in body["value"]:
                doc = {k: v for k, v in action.items() if not k.startswith("@")}
                docs.setdefault(doc["id"], {}).update(doc)
                results.append({"key": doc["id"], "status": True, "statusCode": 200})
            return httpx.Response(200, json={"value": results})

        if parts[2:] == ["docs", "search"]:
            term = (body.get("search") or "").lower()
            selected = body.get("select", "").split(",")
            rows = []
            for key in sorted(docs, key=int):
                doc = docs[key]
                if term and term not in (doc.get("content") or "").lower():
                    continue
                row = {field: doc.get(field) for field in selected}
                row["@search.score"] = 1.0
                rows.append(row)
            return httpx.Response(200, json={"value": rows})

        return httpx.Response(400)


@pytest.fixture
def tokenizer():
    return WordTokenizer()


@pytest.fixture
def search_config():
    return SearchServiceConfig(
        endpoint="https://unit-test.search.windows.net",
        api_key=SecretStr("search-key"),
        index_name="test-index",
    )


@pytest.fixture
def embedding_config():
    return EmbeddingConfig(
        endpoint="https://unit-test.openai.azure.com",
        api_key=SecretStr("openai-key"),
        deployment="text-embedding-ada-002",
    )


@pytest.fixture
def chat_config():
    return ChatModelConfig(
        endpoint="https://unit-test.openai.azure.com",
        api_key=SecretStr("openai-key"),
        deployment="gpt-4o-mini",
    )


@pytest.fixture
def fake_search_service():
    return FakeSearchService()
