from .constants import ClientEvent, ServerEvent, WSCloseCode, WSConstants

__all__ = ["ClientEvent", "ServerEvent", "WSCloseCode", "WSConstants"]
