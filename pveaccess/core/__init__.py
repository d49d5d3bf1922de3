"""Core client logic, independent of any front-end.

Module Structure:
    - proxmox/      : Proxmox VE /access API client (session, records, services)
    - validators.py : Hostname and principal normalization
"""
