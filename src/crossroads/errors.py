from __future__ import annotations

from discord.app_commands import AppCommandError


class CrossroadsError(AppCommandError):
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class AdminOnlyError(CrossroadsError):
    default_message = "This command is only available to admins."


class SquadmakerOnlyError(CrossroadsError):
    default_message = "This command is only available to squadmakers."


class GuildOnlyError(CrossroadsError):
    default_message = "This command is only available within a guild."


class NotRegisteredError(CrossroadsError):
    default_message = "User not registered"


class TierNotFulfilledError(CrossroadsError):
    default_message = "Tier requirement not fulfilled"


class AlreadySignedUpError(CrossroadsError):
    default_message = "Already signed up"


class SignupBoardError(CrossroadsError):
    default_message = "Unable to update the signup board."


class ConversationError(CrossroadsError):
    """Base class for failures of an interactive DM conversation."""

    is_init_err = False


class ConversationLockedError(ConversationError):
    default_message = "You are already in another conversation with me. Finish that one first."
    is_init_err = True


class NoDmChannelError(ConversationError):
    default_message = "I was unable to open a direct message channel with you."
    is_init_err = True


class DmBlockedError(ConversationError):
    default_message = "I can not send you direct messages. Please allow DMs from server members."
    is_init_err = True


class TimedOutError(ConversationError):
    default_message = "Conversation timed out"


class CanceledError(ConversationError):
    default_message = "Conversation got canceled"
