"""Account directory package."""

from pantry_ledger.accounts.directory import AVATAR_TAGS, AccountDirectory

__all__ = ["AVATAR_TAGS", "AccountDirectory"]
