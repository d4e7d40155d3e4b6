"""Exception hierarchy shared by the resolver, persister, settings and tools."""


class ImageToolError(Exception):
    """Base class for all errors raised by the image tool service."""


class ConfigurationError(ImageToolError):
    """Startup configuration is missing or invalid."""


class InvalidToolArguments(ImageToolError):
    """A tool was invoked with arguments it cannot work with."""


class ResolutionError(ImageToolError):
    """An image reference could not be turned into request content."""


class MalformedInline(ResolutionError):
    """A `data:image/...` reference does not split into type and payload."""


class UnrecognizedReference(ResolutionError):
    """A reference is neither inline, a URL, nor an existing local file."""


class PersistenceFailure(ImageToolError):
    """A single response image could not be decoded or written."""


class RemoteCallFailure(ImageToolError):
    """The chat completion request failed or returned an unusable body."""


class SettingsValidationError(ImageToolError):
    """A requested settings change was rejected before being applied."""


class NotAbsolute(SettingsValidationError):
    pass


class NotADirectory(SettingsValidationError):
    pass


class CreateFailed(SettingsValidationError):
    pass


class UnsupportedModel(SettingsValidationError):
    pass
