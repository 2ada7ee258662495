from .handlers import GatewayEndpoint

__all__ = ["GatewayEndpoint"]
