"""
Activations module - Machine binding of license keys.

This module handles:
- Activation entity and domain logic
- Binding a key to exactly one machine
- Activate, validate and deactivate requests
"""
