"""
Core module for shared domain infrastructure.

This module contains:
- Domain exceptions and value objects
- Database error translation
- Middleware components
- Metrics and tracing setup
"""
