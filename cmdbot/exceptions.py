class CmdBotError(Exception):
    """Base class for errors raised by the custom command system."""


class StorageUnavailable(CmdBotError):
    """The backing store could not be reached or did not answer in time."""


class MalformedRecord(CmdBotError):
    """A stored command value could not be decoded."""


class InvalidCommand(CmdBotError, ValueError):
    """A command definition was rejected before being stored."""
