class LaunchError(RuntimeError):
    """Raised when a required path is missing before the module is spawned."""


class ChannelError(RuntimeError):
    """Raised when the message channel to the module fails at the transport level."""
