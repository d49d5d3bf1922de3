"""Client library for the Proxmox VE access-control API."""

__version__ = "0.1.0"
