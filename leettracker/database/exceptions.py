"""Storage errors raised by the repositories."""


class DatabaseError(Exception):
    """Base class; callers catch this to isolate a failed store operation."""
    pass


class DatabaseConnectionError(DatabaseError):
    """The engine was never initialised or could not connect."""
    pass


class DatabaseOperationError(DatabaseError):
    """A statement failed (wraps the underlying SQLAlchemyError)."""
    pass


class AccountNotFoundError(DatabaseError):
    """No tracked account row for this member in this guild."""

    def __init__(self, discord_id: str, guild_id: str):
        super().__init__(f"No tracked account for {discord_id} in guild {guild_id}")
        self.discord_id = discord_id
        self.guild_id = guild_id
