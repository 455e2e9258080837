"""包仓库客户端"""

from fur.services.registry.client import RegistryClient

__all__ = ["RegistryClient"]
