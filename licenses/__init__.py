"""
Licenses module - License key management.

This module handles:
- LicenseKey entity and domain logic
- Signed key generation and verification
- Expiry windows
- Admin actions, listing and stats
"""
