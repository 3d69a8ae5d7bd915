"""Tokenizers used to measure rendered context against a token budget."""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

import tiktoken


@runtime_checkable
class Tokenizer(Protocol):
    """Anything that turns text into a list of token ids."""

    def encode(self, text: str) -> List[int]:
        ...


class TiktokenTokenizer:
    """
    Tokenizer backed by tiktoken.

    Uses the encoding registered for `model_name`; unknown model names fall
    back to `cl100k_base`.
    """

    def __init__(self, model_name: str = "gpt-4o-mini") -> None:
        try:
            self._encoding = tiktoken.encoding_for_model(model_name)
        except KeyError:
            self._encoding = tiktoken.get_encoding("cl100k_base")

    def encode(self, text: str) -> List[int]:
        return self._encoding.encode(text)
