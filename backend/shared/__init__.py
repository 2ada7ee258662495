"""
Shared module for common utilities across the REST API and WS gateway.

STRUCTURE:
- shared.security: Authentication, authorization, rate limiting
  - auth.py: staff JWT and table credentials, current_user_context, require_roles
  - password.py: Bcrypt hashing
  - rate_limit.py: slowapi limiter

- shared.infrastructure: Database and events
  - db.py: SQLAlchemy engine/sessions, safe_commit()
  - correlation.py: request correlation IDs
  - events/: DomainEvent and group naming

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Roles, status sets, transition tables

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - schemas.py: Pydantic request/response schemas

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, current_user_context
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import Roles, OrderStatus
    from shared.utils.exceptions import NotFoundError, ConflictError
"""
