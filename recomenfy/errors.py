# recomenfy/errors.py
from __future__ import annotations
from typing import Optional


class RecomenfyError(Exception):
    """Base error. `user_message` is what the HTTP layer shows to the user."""

    user_message = "Something went wrong while building your playlist."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)


class NotAuthenticatedError(RecomenfyError):
    user_message = "User not authenticated with Spotify."


class UpstreamFetchError(RecomenfyError):
    user_message = "Failed to fetch your listening data from Spotify."


class ConceptGenerationFailed(RecomenfyError):
    # parse and validation failures below share this message on purpose
    user_message = "Failed to generate playlist concept from AI."


class InvalidConceptFormatError(ConceptGenerationFailed):
    pass


class MalformedConceptError(ConceptGenerationFailed):
    pass


class PlaylistWriteError(RecomenfyError):
    user_message = "Failed to create the playlist on Spotify."

    def __init__(self, message: Optional[str] = None, playlist_id: Optional[str] = None):
        super().__init__(message)
        # set when the playlist exists but attaching tracks failed
        self.playlist_id = playlist_id
