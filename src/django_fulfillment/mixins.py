"""Mixins for django-fulfillment models."""

import os
from typing import Any, Dict


class EnvFallbackMixin:
    """Read blank settings fields from environment variables.

    Map field names to env var names in ENV_FALLBACKS. Precedence:
        1. Database value (if not blank)
        2. Environment variable
        3. The default passed to get_with_fallback()
    """

    ENV_FALLBACKS: Dict[str, str] = {}

    def get_with_fallback(self, field_name: str, default: Any = "") -> Any:
        db_value = getattr(self, field_name, None)
        if db_value not in (None, ""):
            return db_value

        env_var = self.ENV_FALLBACKS.get(field_name)
        if env_var:
            env_value = os.environ.get(env_var, "")
            if env_value:
                return env_value

        return default
