"""
Configuration

Environment-sourced settings plus the explicit configuration structs that are
handed to component constructors.

`Settings` only reads the environment (and `.env`). It never builds clients.
Each component receives the narrow config object it needs:

- SearchServiceConfig  -> AzureSearchDataSource, SearchClient, SearchIndexClient
- EmbeddingConfig      -> Embedder
- ChatModelConfig      -> LLMClient

The `*_config()` builders check required values eagerly and raise
`ConfigurationError` naming the missing environment variables, so a
misconfigured process fails before the first network call.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.errors import ConfigurationError
from .search.models import SearchMode


DEFAULT_SEARCH_API_VERSION = "2023-11-01"
DEFAULT_OPENAI_API_VERSION = "2024-02-01"
DEFAULT_SEMANTIC_CONFIGURATION = "my-semantic-config-default"


# ---------------------------------------------------------------------
# Component Config Structs
# ---------------------------------------------------------------------

class SearchServiceConfig(BaseModel):
    """Connection details for one Azure AI Search index."""

    endpoint: str
    api_key: SecretStr
    index_name: str
    semantic_configuration: Optional[str] = DEFAULT_SEMANTIC_CONFIGURATION
    query_language: Optional[str] = None
    api_version: str = DEFAULT_SEARCH_API_VERSION

    model_config = ConfigDict(extra="forbid", frozen=True)


class EmbeddingConfig(BaseModel):
    """Azure OpenAI embedding deployment."""

    endpoint: str
    api_key: SecretStr
    deployment: str
    api_version: str = DEFAULT_OPENAI_API_VERSION

    model_config = ConfigDict(extra="forbid", frozen=True)


class ChatModelConfig(BaseModel):
    """Azure OpenAI chat-completion deployment."""

    endpoint: str
    api_key: SecretStr
    deployment: str
    api_version: str = DEFAULT_OPENAI_API_VERSION
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_tokens: int = Field(default=800, ge=1)

    model_config = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------
# Environment Settings
# ---------------------------------------------------------------------

class Settings(BaseSettings):
    # Azure AI Search
    azure_search_endpoint: Optional[str] = None
    secret_azure_search_key: Optional[SecretStr] = None
    azure_search_index_name: str = "sharepoint-index2"
    azure_search_semantic_configuration: str = DEFAULT_SEMANTIC_CONFIGURATION
    azure_search_query_language: Optional[str] = None
    azure_search_api_version: str = DEFAULT_SEARCH_API_VERSION

    # Azure OpenAI
    azure_openai_endpoint: Optional[str] = None
    secret_azure_openai_api_key: Optional[SecretStr] = None
    azure_openai_deployment_name: Optional[str] = None
    azure_openai_embedding_deployment_name: Optional[str] = None
    azure_openai_api_version: str = DEFAULT_OPENAI_API_VERSION

    # Retrieval behaviour
    search_data_source_name: str = "armelysearchservice"
    search_mode: SearchMode = SearchMode.SEMANTIC
    search_vector_k: int = Field(default=2, ge=1)
    search_token_budget: int = Field(default=1500, ge=1)
    search_vector_dimensions: Optional[int] = Field(default=None, ge=1)

    # Ingestion
    ingest_data_dir: str = "./data"
    ingest_base_uri: str = "https://example.com"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Config builders
    # ------------------------------------------------------------------

    def search_config(self) -> SearchServiceConfig:
        _require(self, [
            "azure_search_endpoint",
            "secret_azure_search_key",
            "azure_search_index_name",
        ])
        return SearchServiceConfig(
            endpoint=self.azure_search_endpoint,
            api_key=self.secret_azure_search_key,
            index_name=self.azure_search_index_name,
            semantic_configuration=self.azure_search_semantic_configuration or None,
            query_language=self.azure_search_query_language or None,
            api_version=self.azure_search_api_version,
        )

    def embedding_config(self) -> EmbeddingConfig:
        _require(self, [
            "azure_openai_endpoint",
            "secret_azure_openai_api_key",
            "azure_openai_embedding_deployment_name",
        ])
        return EmbeddingConfig(
            endpoint=self.azure_openai_endpoint,
            api_key=self.secret_azure_openai_api_key,
            deployment=self.azure_openai_embedding_deployment_name,
            api_version=self.azure_openai_api_version,
        )

    def chat_model_config(self) -> ChatModelConfig:
        _require(self, [
            "azure_openai_endpoint",
            "secret_azure_openai_api_key",
            "azure_openai_deployment_name",
        ])
        return ChatModelConfig(
            endpoint=self.azure_openai_endpoint,
            api_key=self.secret_azure_openai_api_key,
            deployment=self.azure_openai_deployment_name,
            api_version=self.azure_openai_api_version,
        )


def _require(settings: Settings, names: List[str]) -> None:
    """Raise ConfigurationError listing every unset or blank setting."""
    missing = []
    for name in names:
        value = getattr(settings, name)
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        if not value:
            missing.append(name.upper())

    if missing:
        raise ConfigurationError(missing)
