"""Target session credentials"""
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tasksync.exceptions import ConfigurationError


class TargetCredentials(BaseModel):
    """User and password for the Hansoft session, as stored in the auth file"""

    model_config = ConfigDict(populate_by_name=True)

    user: str = Field(alias="User")
    password: str = Field(alias="Password")

    @classmethod
    def load(cls, path: str) -> "TargetCredentials":
        """Load credentials from a JSON file like ``{"User": ..., "Password": ...}``."""
        try:
            body = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Failed to load '{path}': {e}") from e
        try:
            return cls.model_validate_json(body)
        except (ValueError, ValidationError) as e:
            raise ConfigurationError(f"Failed to parse '{path}': {e}") from e
