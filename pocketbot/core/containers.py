from dependency_injector import containers, providers

from pocketbot.core.settings import Settings
from pocketbot.core.state import SharedState
from pocketbot.plugins.commands import FunCommands, GeneralCommands, OwnerCommands
from pocketbot.plugins.help import PocketHelpCommand


class Container(containers.DeclarativeContainer):
    """Dependency Injection Container for the bot.

    ``config`` must be overridden with an already-loaded :class:`Settings`
    (see :func:`build_container`); the shared state is a singleton so every
    command group reads the same startup values.
    """

    config = providers.Singleton(Settings)

    shared_state = providers.Singleton(SharedState)

    help_command = providers.Factory(PocketHelpCommand)

    # Command groups; the bot is supplied by the lifecycle at build time.
    fun_cog = providers.Factory(FunCommands, bot=providers.Dependency())

    general_cog = providers.Factory(
        GeneralCommands,
        bot=providers.Dependency(),
        state=shared_state,
    )

    owner_cog = providers.Factory(
        OwnerCommands,
        bot=providers.Dependency(),
        state=shared_state,
    )


def build_container(app_settings: Settings) -> Container:
    """Create the container with the loaded settings in place of the default."""
    container = Container()
    # Replace default Settings() singleton with the already-initialised one
    container.config.override(providers.Object(app_settings))
    return container
