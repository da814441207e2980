"""
Shared module for cross-cutting infrastructure used by the storefront.

STRUCTURE:
- shared.security: Bearer token verification and rate limiting
  - auth.py: JWT verification, user id extraction
  - rate_limit.py: slowapi limiter and 429 handler

- shared.infrastructure: Database, cache and request plumbing
  - db.py: SQLAlchemy sessions, safe_commit()
  - redis/: Sync connection pool, cart cache keys and TTL
  - correlation.py: X-Request-ID middleware and logging filter

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Cart change types, messages, limits

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging

IMPORT EXAMPLES:
    from shared.security.auth import user_id_from_authorization
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import CartChangeType, Limits
    from shared.utils.exceptions import ExternalServiceError, InternalError
"""
