from .models import CommandRecord
from .registry import CommandRegistry

__all__ = ["CommandRecord", "CommandRegistry"]
