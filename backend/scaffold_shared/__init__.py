"""
Shared module for configuration and infrastructure used by the scaffold.

STRUCTURE:
- scaffold_shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging

- scaffold_shared.infrastructure: Database and request plumbing
  - db.py: SQLAlchemy sessions, safe_commit()
  - correlation.py: Correlation ID middleware and log filter

- scaffold_shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging

IMPORT EXAMPLES:
    from scaffold_shared.infrastructure.db import get_db, safe_commit
    from scaffold_shared.config.settings import settings
    from scaffold_shared.utils.exceptions import NotFoundError, ValidationFailedError
"""
