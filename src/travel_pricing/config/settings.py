"""
Centralized settings and path configuration for the pricing engine.
"""
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    # Walk up from this file to find the project root
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Rule files
    rules_csv: Optional[Path] = None
    compiled_rules: Optional[Path] = None

    # Pricing policy
    tax_rate: float = 0.10  # flat VAT, no regional variation
    quote_ttl_hours: int = 24

    log_level: str = "INFO"

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure."""
        root = project_root or get_project_root()
        rules_dir = root / 'src' / 'travel_pricing' / 'rules'

        return cls(
            project_root=root,
            rules_csv=rules_dir / 'rules.csv',
            compiled_rules=rules_dir / 'compiled_rules.json',
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
