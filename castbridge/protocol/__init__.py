# protocol/__init__.py

from .commands import COMMAND_ARGS, read_arguments
from .dispatcher import Acknowledgement, CommandDispatcher

__all__ = [
    "COMMAND_ARGS", "read_arguments",
    "Acknowledgement", "CommandDispatcher"]
