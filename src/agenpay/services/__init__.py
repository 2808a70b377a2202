"""Application services."""

from agenpay.services.dex_service import CatalogResult, DexService, ServiceStats

__all__ = [
    "DexService",
    "CatalogResult",
    "ServiceStats",
]
