"""Config subpackage - paths and pricing policy settings."""
from .settings import Settings, get_settings

__all__ = ['Settings', 'get_settings']
