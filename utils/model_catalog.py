"""Image models the server is allowed to call."""

SUPPORTED_MODELS = (
    "google/gemini-2.5-flash-image-preview:free",
    "google/gemini-2.5-flash-image-preview",
)
DEFAULT_MODEL = SUPPORTED_MODELS[0]
