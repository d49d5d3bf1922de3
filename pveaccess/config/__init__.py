"""Configuration module for the Proxmox access client."""
from .settings import PveSettings, load_settings

__all__ = ["PveSettings", "load_settings"]
