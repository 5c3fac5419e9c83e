# Routers package
from . import email_imports

__all__ = ["email_imports"]
