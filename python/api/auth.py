"""
Authentication Module

Provides header-based user identification for the API.
"""

import os
from pathlib import Path

import yaml
from fastapi import Header, HTTPException, status
from pydantic import BaseModel


class User(BaseModel):
    """Authenticated user model."""

    user_id: str
    name: str
    email: str | None = None


class AuthConfig:
    """Authentication configuration loaded from users.yaml."""

    def __init__(self, config_path: Path | str | None = None):
        """Initialize auth config.

        Args:
            config_path: Path to users.yaml
        """
        if config_path is None:
            config_path = Path(__file__).parent.parent.parent / "config" / "users.yaml"

        self.config_path = Path(config_path)
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML."""
        if self.config_path.exists():
            with open(self.config_path) as f:
                self.config = yaml.safe_load(f) or {}
        else:
            # Default config for development
            self.config = {
                "users": [
                    {
                        "user_id": "dev",
                        "name": "Developer",
                        "email": None,
                    }
                ],
            }

    def get_user(self, user_id: str) -> User | None:
        """Get user by ID.

        Args:
            user_id: User identifier

        Returns:
            User object or None if not found
        """
        for user_data in self.config.get("users", []):
            if str(user_data.get("user_id")) == str(user_id):
                return User(
                    user_id=str(user_id),
                    name=user_data.get("name", "Unknown"),
                    email=user_data.get("email"),
                )

        return None


# Global auth config instance
auth_config = AuthConfig()


def is_development() -> bool:
    return os.getenv("ENVIRONMENT", "development") == "development"


async def get_current_user(
    x_user_id: str | None = Header(None, alias="X-User-ID"),
) -> User:
    """Get current authenticated user from request headers.

    Args:
        x_user_id: User ID from header

    Returns:
        Authenticated User

    Raises:
        HTTPException: If authentication fails
    """
    if is_development():
        if not x_user_id:
            return auth_config.get_user("dev") or User(user_id="dev", name="Developer")

    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-ID header",
        )

    user = auth_config.get_user(x_user_id)

    if not user:
        # Development mode: any ID is accepted
        if is_development():
            return User(user_id=x_user_id, name=x_user_id)

        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User not authorized",
        )

    return user
