# apps/reactions/exceptions.py


class ReactionProcessingError(Exception):
    """The immediate apply failed and was rolled back; nothing was changed."""

    default_message = "Failed to process reaction"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
