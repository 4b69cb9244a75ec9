"""Identity vault service.

Registers users, authenticates them with stateless signed tokens, and keeps a
single sensitive identifier per user encrypted at rest.
"""

__version__ = "0.1.0"
