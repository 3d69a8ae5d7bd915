"""
Index Schema

The fixed index definition used by the offline setup job, in the JSON shape
expected by `PUT /indexes/{name}`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..search.models import (
    FIELD_CONTENT,
    FIELD_CONTENT_VECTOR,
    FIELD_DISPLAY_TITLE,
    FIELD_ID,
    FIELD_SOURCE_URI,
    FIELD_TITLE,
)

SUGGESTER_NAME = "my-suggester"
SEMANTIC_CONFIGURATION_NAME = "my-semantic-config-default"
VECTOR_PROFILE_NAME = "content-vector-profile"
VECTOR_ALGORITHM_NAME = "content-vector-hnsw"


def _string_field(name: str, searchable: bool = True, key: bool = False) -> Dict[str, Any]:
    return {
        "name": name,
        "type": "Edm.String",
        "key": key,
        "searchable": searchable,
        "retrievable": True,
    }


def build_index_schema(
    name: str,
    semantic_configuration: str = SEMANTIC_CONFIGURATION_NAME,
    vector_dimensions: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Build the index definition.

    Parameters
    ----------
    name : str
        Index name.

    semantic_configuration : str
        Name of the (default) semantic configuration. It ranks the display
        title first, then content and the item name.

    vector_dimensions : Optional[int]
        When set, adds a `content_vector` field and an HNSW vector profile
        so the index can serve vector and hybrid queries.
    """
    fields: List[Dict[str, Any]] = [
        _string_field(FIELD_ID, searchable=False, key=True),
        _string_field(FIELD_TITLE),
        _string_field(FIELD_SOURCE_URI),
        _string_field(FIELD_CONTENT),
        _string_field(FIELD_DISPLAY_TITLE),
    ]

    schema: Dict[str, Any] = {
        "name": name,
        "fields": fields,
        "corsOptions": {"allowedOrigins": ["*"]},
        "suggesters": [
            {
                "name": SUGGESTER_NAME,
                "searchMode": "analyzingInfixMatching",
                "sourceFields": [FIELD_TITLE, FIELD_CONTENT],
            }
        ],
        "semantic": {
            "defaultConfiguration": semantic_configuration,
            "configurations": [
                {
                    "name": semantic_configuration,
                    "prioritizedFields": {
                        "titleField": {"fieldName": FIELD_DISPLAY_TITLE},
                        "prioritizedContentFields": [
                            {"fieldName": FIELD_CONTENT},
                            {"fieldName": FIELD_TITLE},
                        ],
                    },
                }
            ],
        },
    }

    if vector_dimensions is not None:
        fields.append(
            {
                "name": FIELD_CONTENT_VECTOR,
                "type": "Collection(Edm.Single)",
                "searchable": True,
                "retrievable": False,
                "dimensions": vector_dimensions,
                "vectorSearchProfile": VECTOR_PROFILE_NAME,
            }
        )
        schema["vectorSearch"] = {
            "algorithms": [{"name": VECTOR_ALGORITHM_NAME, "kind": "hnsw"}],
            "profiles": [
                {"name": VECTOR_PROFILE_NAME, "algorithm": VECTOR_ALGORITHM_NAME}
            ],
        }

    return schema
