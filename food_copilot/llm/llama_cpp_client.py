import logging
import json
import httpx
from typing import Any, Dict, List, Optional

from .base import DirectiveGenerator
from food_copilot.config import GENERATOR_RETRIES, LLAMA_HOST, LLAMA_PORT, LLM_TIMEOUT
from food_copilot.directive_normalizer import extract_json_text
from food_copilot.utils.error_handling import GeneratorError, retry_with_backoff

logger = logging.getLogger(__name__)


class LlamaCppClient(DirectiveGenerator):
    """Client for llama.cpp server (OpenAI compatible API)"""

    def __init__(self, model_name: str, base_url: Optional[str] = None, timeout: float = LLM_TIMEOUT):
        self.model_name = model_name
        self.base_url = base_url or f"http://{LLAMA_HOST}:{LLAMA_PORT}/v1"
        self.timeout = timeout
        logger.info(f"🔄 [LlamaCpp] Initializing generator client for {self.base_url}")

    def health_check(self) -> Dict:
        """Check health status of llama-server"""
        try:
            resp = httpx.get(f"{self.base_url}/models", timeout=2.0)
            return {
                "status": "online" if resp.status_code == 200 else "loading" if resp.status_code == 503 else "error",
                "provider": "llama_cpp",
                "model": self.model_name,
            }
        except httpx.HTTPError as e:
            return {"status": "offline", "provider": "llama_cpp", "error": str(e)}

    @staticmethod
    def _to_openai_messages(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Images travel as data-URL content parts."""
        converted = []
        for m in messages:
            images = m.get("images") or []
            if not images:
                converted.append({"role": m["role"], "content": m["content"]})
                continue
            parts: List[Dict[str, Any]] = [{"type": "text", "text": m["content"]}]
            for b64 in images:
                parts.append({"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{b64}"}})
            converted.append({"role": m["role"], "content": parts})
        return converted

    @retry_with_backoff(retries=GENERATOR_RETRIES, backoff_in_seconds=1)
    def generate_directives(
        self,
        messages: List[Dict[str, Any]],
        temperature: float = 0.4
    ) -> Any:
        payload = {
            "model": self.model_name,
            "messages": self._to_openai_messages(messages),
            "temperature": temperature,
            "stream": False,
            "response_format": {"type": "json_object"},
        }

        try:
            resp = httpx.post(f"{self.base_url}/chat/completions", json=payload, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            logger.error(f"❌ [LlamaCpp] Generate Error: {e}")
            raise GeneratorError(f"llama.cpp request failed: {e}") from e
        except json.JSONDecodeError as e:
            raise GeneratorError("llama.cpp returned a non-JSON envelope") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise GeneratorError("llama.cpp response has no message content") from e

        if not content or not str(content).strip():
            raise GeneratorError("llama.cpp returned an empty completion")

        try:
            parsed = json.loads(extract_json_text(str(content)))
        except (ValueError, RecursionError) as e:
            logger.error(f"❌ [LlamaCpp] Completion is not JSON: {str(content)[:120]!r}")
            raise GeneratorError("llama.cpp completion is not JSON") from e

        logger.info(f"✅ [LlamaCpp] Generated {len(content)} chars")
        return parsed
