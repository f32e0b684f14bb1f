"""
Configuration management for TribuAnalyzer
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration"""

    # Gemini (the original deployment used GOOGLE_GENERATIVE_AI_API_KEY)
    GEMINI_API_KEY: str = os.getenv('GEMINI_API_KEY') or os.getenv('GOOGLE_GENERATIVE_AI_API_KEY', '')

    # Advisory backends, highest priority first.
    # Pydantic AI requires the 'google-gla:' prefix for Gemini models.
    DEFAULT_ADVISORY_MODELS: List[str] = [
        'google-gla:gemini-3.1-pro-preview',
        'google-gla:gemini-3-flash-preview',
    ]
    ADVISORY_MODELS: str = os.getenv('ADVISORY_MODELS', '')

    # Timeouts (seconds)
    ADVISORY_ATTEMPT_TIMEOUT: float = float(os.getenv('ADVISORY_ATTEMPT_TIMEOUT', '60'))
    ADVISORY_REQUEST_TIMEOUT: float = float(os.getenv('ADVISORY_REQUEST_TIMEOUT', '120'))

    # Reporting defaults
    DEFAULT_CURRENCY: str = os.getenv('DEFAULT_CURRENCY', 'USD')
    DEFAULT_DATE_PRESET: str = os.getenv('DEFAULT_DATE_PRESET', 'last_7d')

    @classmethod
    def validate(cls) -> bool:
        """Validate required configuration"""
        required = {
            'GEMINI_API_KEY': cls.GEMINI_API_KEY,
        }

        missing = [k for k, v in required.items() if not v]

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return True

    @classmethod
    def get(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get configuration value"""
        return getattr(cls, key, default)

    @classmethod
    def get_advisory_models(cls) -> List[str]:
        """
        Get the ordered list of advisory model identifiers.

        Resolution Order:
        1. ADVISORY_MODELS environment variable (comma-separated)
        2. Config.DEFAULT_ADVISORY_MODELS

        Returns:
            Model identifiers in fallback order (e.g. 'google-gla:gemini-3-flash-preview')
        """
        if cls.ADVISORY_MODELS:
            models = [m.strip() for m in cls.ADVISORY_MODELS.split(',') if m.strip()]
            if models:
                return models
        return list(cls.DEFAULT_ADVISORY_MODELS)
