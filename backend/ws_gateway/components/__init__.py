"""
WebSocket Gateway components.

- core/constants.py: close codes and protocol message names
- events/router.py: DomainEvent -> (group, message) routing
- endpoints/handlers.py: /ws connection handler (auth, joins, message loop)
"""
