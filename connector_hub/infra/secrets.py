"""Secret reference resolution for configuration values and stored credentials."""

import os
from typing import Optional


ENV_PREFIX = "env://"


class SecretsManager:
    """Resolves secret references.

    Stored credentials and configuration values may either hold the secret
    directly or point at an environment variable with ``env://VAR_NAME``.
    """

    def get_secret(self, secret_ref: str) -> Optional[str]:
        """
        Get secret from a reference or return the direct value.

        Supports:
        - env://VAR_NAME - Environment variable
        - Direct value (if not a reference)

        Args:
            secret_ref: Secret reference or direct value

        Returns:
            Secret value or None if not found
        """
        if not secret_ref:
            return None

        if secret_ref.startswith(ENV_PREFIX):
            var_name = secret_ref[len(ENV_PREFIX):]
            return os.getenv(var_name)

        return secret_ref


# Global secrets manager instance
secrets_manager = SecretsManager()


def get_secret(secret_ref: str, fallback: Optional[str] = None) -> Optional[str]:
    """
    Convenience function to get a secret.

    Args:
        secret_ref: Secret reference (env://) or direct value
        fallback: Fallback value if secret not found

    Returns:
        Secret value or fallback
    """
    value = secrets_manager.get_secret(secret_ref)
    return value if value is not None else fallback
