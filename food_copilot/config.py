import os

# Generator configuration
# Provider must be registered in food_copilot.llm.factory.MODEL_REGISTRY

LLM_PROVIDER = os.getenv("LLM_PROVIDER", "llama_cpp")
# Unset means the provider default from the registry
LLM_MODEL = os.getenv("LLM_MODEL")

# llama.cpp server (OpenAI compatible API)
LLAMA_HOST = os.getenv("LLAMA_HOST", "127.0.0.1")
LLAMA_PORT = int(os.getenv("LLAMA_PORT", "8081"))

# Ollama daemon
LLM_ENDPOINT = os.getenv("LLM_ENDPOINT", "http://localhost:11434")

# Seconds to wait for a single generator call
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "120"))

# Retries for transient generator failures (0 disables)
GENERATOR_RETRIES = int(os.getenv("GENERATOR_RETRIES", "2"))

LOG_LEVEL = os.getenv("FOOD_COPILOT_LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]
