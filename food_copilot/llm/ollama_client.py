import json
import logging
import httpx
import ollama
from typing import Any, Dict, List

from .base import DirectiveGenerator
from food_copilot.config import GENERATOR_RETRIES, LLM_ENDPOINT, LLM_TIMEOUT
from food_copilot.directive_normalizer import extract_json_text
from food_copilot.utils.error_handling import GeneratorError, retry_with_backoff

logger = logging.getLogger(__name__)


class OllamaClient(DirectiveGenerator):
    """Wrapper for Ollama-served vision models"""

    def __init__(self, model_name: str, host: str = LLM_ENDPOINT):
        self.client = ollama.Client(host=host, timeout=LLM_TIMEOUT)
        self.model_name = model_name

    def health_check(self) -> Dict:
        try:
            models = self.client.list()
            return {
                "status": "online",
                "provider": "ollama",
                "model": self.model_name,
                "available_models": [m.get('name') or m.get('model') for m in models['models']]
            }
        except Exception as e:
            return {"status": "offline", "provider": "ollama", "error": str(e)}

    @retry_with_backoff(retries=GENERATOR_RETRIES, backoff_in_seconds=1)
    def generate_directives(
        self,
        messages: List[Dict[str, Any]],
        temperature: float = 0.4
    ) -> Any:
        valid_messages = []
        for m in messages:
            if not m.get("content") and not m.get("images"):
                continue
            msg = {"role": m["role"], "content": m.get("content", "")}
            if m.get("images"):
                msg["images"] = list(m["images"])
            valid_messages.append(msg)

        if not valid_messages:
            raise GeneratorError("No input messages for the generator")

        try:
            resp = self.client.chat(
                model=self.model_name,
                messages=valid_messages,
                stream=False,
                format="json",
                options={
                    "temperature": temperature,
                    "num_ctx": 8192
                }
            )
        except (ollama.ResponseError, httpx.HTTPError, ConnectionError, OSError) as e:
            logger.error(f"❌ [Ollama] Generate error: {e}")
            raise GeneratorError(f"Ollama request failed: {e}") from e

        content = (resp.get('message') or {}).get('content', '')
        if not content or not content.strip():
            raise GeneratorError("Ollama returned an empty completion")

        try:
            parsed = json.loads(extract_json_text(content))
        except (ValueError, RecursionError) as e:
            logger.error(f"❌ [Ollama] Completion is not JSON: {content[:120]!r}")
            raise GeneratorError("Ollama completion is not JSON") from e

        logger.info(f"✅ [Ollama] Generated {len(content)} chars")
        return parsed
