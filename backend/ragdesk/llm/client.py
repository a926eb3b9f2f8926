from __future__ import annotations
import logging
import os
import time
from dataclasses import dataclass
from typing import Dict, List, Optional
from pydantic import BaseModel
import requests

logger = logging.getLogger(__name__)


class LLMResponse(BaseModel):
    content: Optional[str] = None
    finish_reason: str
    usage: Optional[Dict[str, int]] = None
    time_taken: float
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.content)


@dataclass
class LLMConfig:
    api_base: str = "https://router.huggingface.co/v1"
    model: str = "meta-llama/Llama-3.1-8B-Instruct"
    max_tokens: int = 1024
    temperature: float = 0.2
    timeout: int = 30

    @classmethod
    def from_dict(cls, cfg: Dict) -> "LLMConfig":
        llm = cfg.get("llm", {})
        return cls(
            api_base=llm.get("api_base", cls.api_base),
            model=llm.get("model", cls.model),
            max_tokens=int(llm.get("max_tokens", cls.max_tokens)),
            temperature=float(llm.get("temperature", cls.temperature)),
            timeout=int(llm.get("timeout", cls.timeout)),
        )


class ChatCompletionClient:
    """Client for an OpenAI-compatible chat completions endpoint.

    Never raises on transport or payload problems: the failure comes back as an
    LLMResponse with ``finish_reason="error"`` so each caller can decide whether
    it is recoverable.
    """

    def __init__(self, config: LLMConfig | None = None, api_key: str | None = None):
        self.config = config or LLMConfig()
        self.api_key = api_key or os.getenv("LLM_API_KEY") or os.getenv("HF_TOKEN")
        if not self.api_key:
            raise ValueError("LLM_API_KEY (or HF_TOKEN) environment variable not set")

        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def chat(
        self,
        system_prompt: str,
        user_message: str,
        conversation_history: List[Dict[str, str]] | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        messages = []
        if system_prompt and system_prompt.strip():
            messages.append({"role": "system", "content": system_prompt.strip()})
        if conversation_history:
            messages.extend(conversation_history)
        messages.append({"role": "user", "content": user_message.strip()})
        url = f"{self.config.api_base.rstrip('/')}/chat/completions"
        payload = {
            "model": self.config.model,
            "messages": messages,
            "max_tokens": max_tokens if max_tokens is not None else self.config.max_tokens,
            "temperature": temperature if temperature is not None else self.config.temperature,
        }
        start_time = time.time()
        try:
            response = requests.post(
                url,
                headers=self.headers,
                json=payload,
                timeout=self.config.timeout,
            )
            response.raise_for_status()
            data = response.json()
            if isinstance(data, dict) and data.get("choices"):
                choice = data["choices"][0]
                message_content = (choice.get("message") or {}).get("content") or ""
                usage = data.get("usage") or {}

                return LLMResponse(
                    content=message_content.strip(),
                    finish_reason=choice.get("finish_reason") or "stop",
                    usage={
                        "prompt_tokens": usage.get("prompt_tokens", 0),
                        "completion_tokens": usage.get("completion_tokens", 0),
                        "total_tokens": usage.get("total_tokens", 0),
                    },
                    time_taken=time.time() - start_time,
                    error=None,
                )
            else:
                raise RuntimeError(f"Unexpected response format: {data}")

        except Exception as e:
            logger.warning(f"Chat completion failed ({self.config.model}): {e}")
            return LLMResponse(
                finish_reason="error",
                time_taken=time.time() - start_time,
                error=str(e),
            )


def create_client(cfg: Dict | None = None) -> ChatCompletionClient:
    config = LLMConfig.from_dict(cfg) if cfg else None
    return ChatCompletionClient(config)
