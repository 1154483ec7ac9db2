"""Model registry loaded from config/models.yaml.

Built once at startup and kept on the application state; request handlers get
it through a dependency instead of reading the file again.
"""

import logging
import math
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

Provider = Literal["openai", "anthropic", "gemini"]


class ModelRegistryError(Exception):
    pass


class Pricing(BaseModel):
    input: float = 0.0
    output: float = 0.0


class ModelConfig(BaseModel):
    name: str
    provider: Provider
    model_id: str
    image: bool = False
    max_tokens: int = 4000
    context_window: int = 0
    pricing: Pricing = Field(default_factory=Pricing)
    description: str = ""


class ModelEntry(BaseModel):
    key: str
    config: ModelConfig

    def to_public(self) -> dict:
        c = self.config
        return {
            "id": self.key,
            "name": c.name,
            "provider": c.provider,
            "model": c.model_id,
            "description": c.description,
            "image": c.image,
            "context_window": c.context_window,
            "max_tokens": c.max_tokens,
            "pricing": c.pricing.model_dump(),
        }


class ModelsFile(BaseModel):
    models: dict[str, dict[str, ModelConfig]]
    default_model: str = ""
    image_upload_enabled: bool = True
    max_file_size_mb: int = 50
    supported_file_types: list[str] = Field(default_factory=list)


class ModelRegistry:
    def __init__(self, config: ModelsFile):
        self.config = config
        # Order follows the file: provider groups, then models within each group
        self._entries = [
            ModelEntry(key=key, config=model)
            for group in config.models.values()
            for key, model in group.items()
        ]
        self._by_key = {e.key: e for e in self._entries}

    @classmethod
    def load(cls, path: Path) -> "ModelRegistry":
        try:
            raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
            registry = cls(ModelsFile.model_validate(raw))
        except (OSError, yaml.YAMLError, ValidationError) as e:
            logger.error(f"Error loading models config from {path}: {e}")
            raise ModelRegistryError("Failed to load models configuration") from e
        logger.info(f"Loaded {len(registry.all_models())} models from {path}")
        return registry

    def all_models(self) -> list[ModelEntry]:
        return list(self._entries)

    def get(self, key: str) -> Optional[ModelEntry]:
        return self._by_key.get(key)

    @property
    def default_key(self) -> str:
        return self.config.default_model

    def resolve(self, key: Optional[str]) -> Optional[ModelEntry]:
        """The requested model; without a key, the default model, else the first one."""
        if key:
            return self.get(key)
        return self.get(self.default_key) or (self._entries[0] if self._entries else None)

    def models_with_image_support(self) -> list[ModelEntry]:
        return [e for e in self._entries if e.config.image]

    def can_handle_images(self, key: str) -> bool:
        entry = self.get(key)
        return entry.config.image if entry else False

    @property
    def image_upload_enabled(self) -> bool:
        return self.config.image_upload_enabled

    @property
    def max_file_size_mb(self) -> int:
        return self.config.max_file_size_mb

    @property
    def supported_file_types(self) -> list[str]:
        return list(self.config.supported_file_types)


def estimate_tokens(text: str) -> int:
    """Rough estimate: one token per four characters of English text."""
    return math.ceil(len(text) / 4)


def fits_context_window(model: ModelConfig, total_tokens: int) -> bool:
    return total_tokens <= model.context_window
