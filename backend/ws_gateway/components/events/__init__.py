from .router import EventRouter, RoutedMessage

__all__ = ["EventRouter", "RoutedMessage"]
