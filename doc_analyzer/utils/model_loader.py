import os
from typing import Optional

from dotenv import load_dotenv
from langchain_openai import ChatOpenAI, OpenAIEmbeddings

from doc_analyzer.exception.custom_exception import ClientNotInitializedError
from doc_analyzer.logger import GLOBAL_LOGGER as log
from doc_analyzer.utils.config_loader import load_config


class ApiKeyManager:
    """Reads the OpenAI key from the environment (or a .env file) if one is set there."""

    OPTIONAL = ["OPENAI_API_KEY"]

    def __init__(self):
        load_dotenv()
        self.keys = {}

        for k in self.OPTIONAL:
            if val := os.getenv(k):
                self.keys[k] = val.strip()
                log.info("Loaded %s from env", k)
            else:
                log.info("%s not set in env, a key must be provided at runtime", k)

    def get(self, key: str) -> Optional[str]:
        return self.keys.get(key)


class ModelLoader:
    """
    Builds the two hosted models a workspace needs from one API key:
    - the embeddings model used for indexing and for queries
    - the chat model that answers questions
    """

    def __init__(self, api_key: str, config: Optional[dict] = None):
        if not api_key or not api_key.strip():
            raise ClientNotInitializedError("OpenAI client not initialized: missing API key")

        self.api_key = api_key.strip()
        self.config = config if config is not None else load_config()

    def load_embeddings(self) -> OpenAIEmbeddings:
        emb_config = self.config["embedding_model"]
        provider = emb_config.get("provider", "openai")
        if provider != "openai":
            raise ValueError(f"Unsupported embeddings provider {provider}")

        model_name = emb_config["model_name"]
        log.info("Loading embedding model | model=%s", model_name)
        return OpenAIEmbeddings(model=model_name, api_key=self.api_key)

    def load_llm(self, role: str = "chat") -> ChatOpenAI:
        if role not in self.config["llm"]:
            log.error("LLM role not found in config | role=%s", role)
            raise ValueError(f"LLM role '{role}' not found in config")

        llm_config = self.config["llm"][role]
        provider = llm_config["provider"]
        if provider != "openai":
            raise ValueError(f"Unsupported provider {provider}")

        model = llm_config["model_name"]
        log.info("Loading LLM | role=%s | model=%s", role, model)
        return ChatOpenAI(
            model=model,
            api_key=self.api_key,
            temperature=llm_config.get("temperature", 0.7),
            max_tokens=llm_config.get("max_tokens"),
        )
