"""
Generator Model Registry (Single Source of Truth)

Only registered models may back the directive generator.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .base import DirectiveGenerator
from food_copilot.config import LLM_MODEL, LLM_PROVIDER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelSpec:
    name: str
    provider: str  # "llama_cpp" | "ollama"
    context_length: int
    supports_images: bool


# CANONICAL MODEL REGISTRY
MODEL_REGISTRY: Dict[str, ModelSpec] = {
    "qwen3-8b": ModelSpec(name="qwen3-8b", provider="llama_cpp", context_length=8192, supports_images=False),
    "qwen2.5vl:7b": ModelSpec(name="qwen2.5vl:7b", provider="ollama", context_length=8192, supports_images=True),
    "llava:13b": ModelSpec(name="llava:13b", provider="ollama", context_length=4096, supports_images=True),
}

DEFAULT_MODEL_BY_PROVIDER: Dict[str, str] = {
    "llama_cpp": "qwen3-8b",
    "ollama": "qwen2.5vl:7b",
}


def get_model_spec(model_name: Optional[str] = None) -> ModelSpec:
    """
    Hard failure when the requested model is not registered.
    """
    target_model = model_name or LLM_MODEL or DEFAULT_MODEL_BY_PROVIDER.get(LLM_PROVIDER, "")

    if target_model not in MODEL_REGISTRY:
        error_msg = f"❌ [REGISTRY] Hard Failure: Model '{target_model}' not found in registry."
        logger.critical(error_msg)
        raise RuntimeError(error_msg)

    return MODEL_REGISTRY[target_model]


def list_registered_models() -> List[str]:
    return list(MODEL_REGISTRY.keys())


class GeneratorFactory:
    """Factory to create generator clients based on registry configuration"""

    @staticmethod
    def create_generator(model_name: Optional[str] = None) -> DirectiveGenerator:
        spec = get_model_spec(model_name)
        logger.info(f"Generator Factory initializing model '{spec.name}' via {spec.provider}")

        if spec.provider == "llama_cpp":
            from .llama_cpp_client import LlamaCppClient
            return LlamaCppClient(model_name=spec.name)
        elif spec.provider == "ollama":
            from .ollama_client import OllamaClient
            return OllamaClient(spec.name)
        else:
            error_msg = f"❌ [FACTORY] Unknown provider '{spec.provider}' in registry spec."
            logger.critical(error_msg)
            raise RuntimeError(error_msg)
