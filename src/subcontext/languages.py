"""Supported languages and Gemini model identifiers."""

LANGUAGE_NAMES = {
    "ar": "Arabic",
    "zh-CN": "Chinese (Simplified)",
    "zh-TW": "Chinese (Traditional)",
    "en": "English",
    "fil": "Filipino",
    "fr": "French",
    "de": "German",
    "hi": "Hindi",
    "id": "Indonesian",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "pt": "Portuguese",
    "ru": "Russian",
    "es": "Spanish",
    "th": "Thai",
}

AI_MODELS = {
    "gemini-2.5-flash": "Gemini 2.5 Flash (Recommended)",
    "gemini-2.5-flash-fastest": "Gemini 2.5 Flash (Fastest)",
}

DEFAULT_MODEL = "gemini-2.5-flash"

# Pseudo-models that map onto a real model with extra generation settings
MODEL_ALIASES = {
    "gemini-2.5-flash-fastest": ("gemini-2.5-flash", {"thinkingConfig": {"thinkingBudget": 0}}),
}


def get_language_name(language: str) -> str:
    """Get full language name from a code or name, case-insensitively."""
    key = language.strip().lower()
    for code, name in LANGUAGE_NAMES.items():
        if key in (code.lower(), name.lower()):
            return name
    return language.strip()


def get_language_code(language: str) -> str:
    """Get the short code for a language code or name, for use in file names."""
    key = language.strip().lower()
    for code, name in LANGUAGE_NAMES.items():
        if key in (code.lower(), name.lower()):
            return code
    return "-".join(key.split())


def resolve_model(model: str) -> tuple[str, dict]:
    """Return the endpoint model name and extra generation config for a model id."""
    return MODEL_ALIASES.get(model, (model, {}))
