"""
Audit module - Append-only trail of license events.
"""
