from typing import List, Dict, Any, Optional
import logging
import httpx

from ..config import ChatModelConfig
from ..core.errors import ChatModelError

logger = logging.getLogger("search_bot.llm")


class LLMClient:
    def __init__(
        self,
        config: ChatModelConfig,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.url = (
            f"{config.endpoint.rstrip('/')}/openai/deployments/"
            f"{config.deployment}/chat/completions"
        )
        self.timeout = timeout
        self._transport = transport

    async def chat(
        self,
        system_prompt: str,
        messages: List[Dict[str, Any]],
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Returns the raw assistant message dict, e.g.:
        {
            "role": "assistant",
            "content": "..."
        }
        """
        payload = {
            "messages": [{"role": "system", "content": system_prompt}] + messages,
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": self.config.max_tokens,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    self.url,
                    params={"api-version": self.config.api_version},
                    json=payload,
                    headers={"api-key": self.config.api_key.get_secret_value()},
                )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Chat completion failed (%s)", type(exc).__name__)
            raise ChatModelError(f"Chat completion failed: {type(exc).__name__}") from exc

        data = resp.json()
        try:
            return data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ChatModelError("Chat completion response missing 'choices'") from exc
