"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    allowed_origins: list = field(
        default_factory=lambda: [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]
    )

    # Data
    data_dir: str = field(default_factory=lambda: os.getenv("DATA_DIR", "./data"))
    persist_path: Optional[str] = field(default_factory=lambda: os.getenv("PROPOSALS_PERSIST_PATH") or None)

    # Document
    proposal_variant: str = field(default_factory=lambda: os.getenv("PROPOSAL_VARIANT", "solar"))
    logo_path: Optional[str] = field(default_factory=lambda: os.getenv("LOGO_PATH") or None)
    company_name: Optional[str] = field(default_factory=lambda: os.getenv("COMPANY_NAME") or None)
    company_address: Optional[str] = field(default_factory=lambda: os.getenv("COMPANY_ADDRESS") or None)
    company_phone: Optional[str] = field(default_factory=lambda: os.getenv("COMPANY_PHONE") or None)
    company_email: Optional[str] = field(default_factory=lambda: os.getenv("COMPANY_EMAIL") or None)

    # Authentication
    admin_user: str = field(default_factory=lambda: os.getenv("ADMIN_USER", "admin"))
    admin_password_hash: Optional[str] = field(
        default_factory=lambda: os.getenv("ADMIN_PASSWORD_HASH") or None
    )
    session_secret: Optional[str] = field(default_factory=lambda: os.getenv("SESSION_SECRET") or None)

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def company_overrides(self) -> dict:
        """Company identity fields that were set explicitly."""
        overrides = {
            "company_name": self.company_name,
            "company_address": self.company_address,
            "company_phone": self.company_phone,
            "company_email": self.company_email,
        }
        return {k: v for k, v in overrides.items() if v}

    def to_dict(self) -> dict:
        """Convert config to dictionary (secrets excluded)."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "allowed_origins": self.allowed_origins,
            "data_dir": self.data_dir,
            "persist_path": self.persist_path,
            "proposal_variant": self.proposal_variant,
            "logo_path": self.logo_path,
            "admin_user": self.admin_user,
        }
