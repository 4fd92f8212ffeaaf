from .base import ChatProvider
from .catalog import CatalogProvider, rank_models
from .factory import available_providers, create_provider
from .fixed import FixedModelProvider

__all__ = [
    "CatalogProvider",
    "ChatProvider",
    "FixedModelProvider",
    "available_providers",
    "create_provider",
    "rank_models",
]
