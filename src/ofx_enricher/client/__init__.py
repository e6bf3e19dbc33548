"""Bank endpoint client."""

from .bank_client import BankClient, describe_session

__all__ = ["BankClient", "describe_session"]
