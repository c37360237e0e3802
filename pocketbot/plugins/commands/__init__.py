from pocketbot.plugins.commands.fun import FunCommands
from pocketbot.plugins.commands.general import GeneralCommands
from pocketbot.plugins.commands.owner import OwnerCommands

__all__ = ["FunCommands", "GeneralCommands", "OwnerCommands"]
