"""
Configuration management for the Messenger relay.

Loads environment variables from .env file and provides typed access to
process-level settings. Per-page credentials live in infra.config.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


class Config:
    """Process-level configuration for the relay server."""

    # Server
    PORT = int(os.getenv("PORT", "3000"))
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Browser origins allowed to call the HTTP endpoints
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    # Webhook subscription handshake
    MESSENGER_VERIFY_TOKEN = os.getenv("MESSENGER_VERIFY_TOKEN", "")

    @classmethod
    def missing(cls) -> list[str]:
        """Names of required settings that are not set."""
        required = ["MESSENGER_VERIFY_TOKEN"]
        return [key for key in required if not getattr(cls, key)]

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        return not cls.missing()


if __name__ == "__main__":
    # Test configuration loading
    print("Configuration loaded:")
    print(f"  Verify Token: {'✓ Set' if Config.MESSENGER_VERIFY_TOKEN else '✗ Missing'}")
    print(f"  Port: {Config.PORT}")
    print(f"  Environment: {Config.ENVIRONMENT}")
    print(f"  CORS Origins: {', '.join(Config.CORS_ORIGINS)}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
