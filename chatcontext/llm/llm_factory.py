import importlib
import logging
from typing import Dict, List, Optional

from omegaconf import OmegaConf, DictConfig
from langchain_core.language_models.chat_models import BaseChatModel

logger = logging.getLogger(__name__)


class LLMFactory:
    """
    A factory class for creating LangChain chat model clients using OmegaConf.
    """

    def __init__(self, llm_config: DictConfig):
        """
        Initializes the factory with the LLM provider configuration.

        Args:
            llm_config: OmegaConf DictConfig containing an 'llm_providers' mapping.
        """
        if (
            not isinstance(llm_config, DictConfig)
            or "llm_providers" not in llm_config
            or not isinstance(llm_config.llm_providers, DictConfig)
        ):
            raise ValueError("LLM config must be a dictionary and contain a 'llm_providers' dictionary.")
        self._config = llm_config.llm_providers

    def get_available_providers(self) -> Dict[str, str]:
        """
        Returns a dictionary of available provider keys and their display names.
        """
        if not self._config:
            return {}
        return {
            key: provider.get("display_name", key)
            for key, provider in self._config.items()
            if provider
        }

    def get_available_models(self) -> Dict[str, List[str]]:
        """Returns the selectable model names of each provider."""
        return {
            key: list(provider.get("models") or [])
            for key, provider in self._config.items()
            if provider
        }

    def get_provider_for_model(self, model_name: str) -> str:
        """
        Resolves the provider serving a model from its name prefix (e.g. 'gpt-' -> 'openai').
        """
        for key, provider in self._config.items():
            if not provider:
                continue
            for prefix in provider.get("model_prefixes") or []:
                if model_name.startswith(prefix):
                    return key
        raise ValueError(f"Provider not recognized for the model: {model_name}")

    def create_llm_client(self, provider_key: str, model_name: Optional[str] = None) -> BaseChatModel:
        """
        Creates an LLM client instance based on the provider key.

        Args:
            provider_key: The key from the llms.yaml file (e.g., 'openai').
            model_name: Overrides the provider's configured model.

        Returns:
            An instance of the specified LangChain chat model.
        """
        if not self._config or provider_key not in self._config:
            raise ValueError(f"Provider '{provider_key}' not found in the configuration. "
                             f"Available providers: {list(self._config.keys() if self._config else [])}")

        provider_config = self._config.get(provider_key)

        if "class" not in provider_config or "params" not in provider_config:
            raise ValueError(f"Provider '{provider_key}' configuration is missing 'class' or 'params'.")

        resolved_params = OmegaConf.to_container(provider_config.params, resolve=True) or {}
        if model_name:
            resolved_params[provider_config.get("model_param", "model")] = model_name

        module_path, class_name = provider_config["class"].rsplit(".", 1)
        try:
            module = importlib.import_module(module_path)
            llm_class = getattr(module, class_name)
        except ImportError:
            raise ImportError(f"Could not import module '{module_path}' for LLM provider '{provider_key}'.")
        except AttributeError:
            raise AttributeError(f"Could not find class '{class_name}' in module '{module_path}'.")

        try:
            client = llm_class(**resolved_params)
        except TypeError as e:
            raise TypeError(f"Failed to instantiate LLM client for '{provider_key}'. "
                            f"Check if the parameters in the config match the class constructor. Error: {e}")

        logger.info(f"Created '{provider_key}' client ({class_name}{f', {model_name}' if model_name else ''}).")
        return client

    def create_chat_model(self, provider_key: Optional[str], model_name: str) -> BaseChatModel:
        """Creates the client for the model chosen for a chat session."""
        if not provider_key or provider_key not in self._config:
            provider_key = self.get_provider_for_model(model_name)
        return self.create_llm_client(provider_key, model_name=model_name)
