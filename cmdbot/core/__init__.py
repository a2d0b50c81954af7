from .bot import DiscordBot
from .dispatcher import EventDispatcher
from .event_system import EventSystem

__all__ = ["DiscordBot", "EventDispatcher", "EventSystem"]
