"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Literal, Optional, Sequence
from zoneinfo import ZoneInfoNotFoundError

import pendulum
import yaml
from pendulum.tz.exceptions import InvalidTimezone
from pydantic import BaseModel, Field, field_validator


class DefaultsConfig(BaseModel):
    """Default settings for a search."""
    duration_minutes: int = 30

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure meeting duration is positive."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value


class Colleague(BaseModel):
    """Colleague/Participant configuration."""
    name: str  # Used as alias
    email: str


class AppConfig(BaseModel):
    """Application configuration."""
    client_id: str = ""
    tenant_id: str = ""
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    timezone: str = "Europe/Berlin"
    events_file: Optional[Path] = None
    token_cache: Literal["keyring", "file"] = "keyring"
    token_cache_file: Optional[Path] = None
    colleagues: List[Colleague] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except (InvalidTimezone, ZoneInfoNotFoundError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("colleagues")
    @classmethod
    def validate_colleagues(cls, value: List[Colleague]) -> List[Colleague]:
        """Ensure colleague aliases and emails are unique."""
        seen_names: set[str] = set()
        seen_emails: set[str] = set()
        for colleague in value:
            name_key = colleague.name.lower()
            email_key = colleague.email.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate colleague name detected: {colleague.name}")
            if email_key in seen_emails:
                raise ValueError(f"Duplicate colleague email detected: {colleague.email}")
            seen_names.add(name_key)
            seen_emails.add(email_key)
        return value

    @property
    def has_graph_credentials(self) -> bool:
        return bool(self.client_id and self.tenant_id)

    def get_authority_url(self) -> str:
        """Get the formatted authority URL."""
        return f"https://login.microsoftonline.com/{self.tenant_id}"

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        # Relative paths are resolved against the config file location
        if config.events_file is not None and not config.events_file.is_absolute():
            config.events_file = config_path.parent / config.events_file
        if config.token_cache_file is not None and not config.token_cache_file.is_absolute():
            config.token_cache_file = config_path.parent / config.token_cache_file

        return config

    def find_colleague_by_name(self, name: str) -> Colleague | None:
        """Find a colleague by their name (alias)."""
        for colleague in self.colleagues:
            if colleague.name.lower() == name.lower():
                return colleague
        return None

    def resolve_participant(self, identifier: str) -> str:
        """
        Resolve a participant identifier (name/alias or email) to an email address.

        Raises:
            ValueError: If identifier cannot be resolved
        """
        if "@" in identifier:
            return identifier.lower()

        colleague = self.find_colleague_by_name(identifier)
        if colleague:
            return colleague.email.lower()

        raise ValueError(
            f"Unknown participant identifier: '{identifier}'. "
            f"Use an email address or a configured name."
        )

    def resolve_participants(self, identifiers: Sequence[str]) -> List[str]:
        """
        Resolve multiple participant identifiers, ensuring uniqueness.

        Args:
            identifiers: Iterable of participant aliases or email addresses.

        Returns:
            List of unique participant email addresses, in input order.
        """
        resolved_emails: List[str] = []
        unknown_identifiers: List[str] = []

        for identifier in identifiers:
            try:
                email = self.resolve_participant(identifier)
            except ValueError:
                unknown_identifiers.append(identifier)
                continue

            if email not in resolved_emails:
                resolved_emails.append(email)

        if unknown_identifiers:
            missing = ", ".join(sorted(set(unknown_identifiers)))
            raise ValueError(
                f"Unknown participant identifier(s): {missing}. "
                "Ensure they exist in the configuration or provide valid email addresses."
            )

        return resolved_emails


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    config_path = Path.cwd() / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
