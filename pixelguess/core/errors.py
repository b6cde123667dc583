"""Exception classes shared by the store, imaging, captioning and HTTP layers."""

from __future__ import annotations


class PixelGuessError(Exception):
    """Base class for recoverable errors that end up in an HTTP response."""

    default_message = "pixelguess error"

    def __init__(self, message=None, **kwargs):
        if message is None:
            details = ", ".join(f"{k}={v}" for k, v in kwargs.items())
            message = f"{self.default_message}: {details}" if details else self.default_message
        super().__init__(message)
        self.message = message
        self.details = kwargs


class ClientError(PixelGuessError):
    """The request itself is wrong; reported as 400."""


class DecodeError(ClientError):
    """Raised when bytes are not a recognised or complete image."""

    default_message = "unable to decode image"


class InvalidSpec(ClientError):
    """Resize parameters are missing, malformed or out of range."""

    default_message = "invalid resize parameters"


class InvalidSample(ClientError):
    default_message = "invalid sample"


class ImageNotFound(ClientError):
    """The referenced image id has no live entry (evicted or never stored)."""

    def __init__(self, image_id: str):
        super().__init__(f"no such image: {image_id}", image_id=image_id)
        self.image_id = image_id


class SampleUnavailable(PixelGuessError):
    """A bundled sample passed validation but could not be read."""

    default_message = "unable to open sample"


class InferenceError(PixelGuessError):
    """The captioning model could not be reached after every attempt."""

    def __init__(self, message=None, attempts: int = 0, **kwargs):
        if message is None:
            message = f"captioning failed after {attempts} attempts"
        super().__init__(message, **kwargs)
        self.attempts = attempts


class InferenceCancelled(InferenceError):
    """The caller went away while the retry loop was still running."""


class ImageEncodingError(RuntimeError):
    """Encoding an image we produced ourselves failed (internal invariant violation)."""

    def __init__(self, message=None, **kwargs):
        if message is None:
            details = ", ".join(f"{k}={v}" for k, v in kwargs.items())
            message = f"Image encoding error. {details}" if details else "Image encoding error."
        super().__init__(message)
        self.details = kwargs
