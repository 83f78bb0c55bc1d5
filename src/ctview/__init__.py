"""
ctview: client-side session management for the ContainerView API.

- auth: login, two-factor verification, token persistence and request signing
- context: application root that owns the single session instance
- cli: command line front end for the session flow
"""

__version__ = "0.1.0"
