"""
plugins/__init__.py
-------------------
Command groups and the help command. Groups are registered in the order
listed in ``pocketbot.core.lifecycle.COMMAND_GROUPS``.
"""
