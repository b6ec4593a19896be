from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class Language:
    code: str
    name: str
    speech_locale: str
    speech_fallback: Optional[str] = None


LANGUAGES: Dict[str, Language] = {
    lang.code: lang
    for lang in (
        Language("en", "English", "en-US"),
        Language("yo", "Yoruba", "yo-NG", "en-US"),
        Language("ig", "Igbo", "ig-NG", "en-US"),
        Language("ha", "Hausa", "ha-NG", "en-US"),
        Language("fr", "French", "fr-FR"),
        Language("es", "Spanish", "es-ES"),
        Language("ar", "Arabic", "ar-SA"),
        Language("sw", "Swahili", "sw-KE", "en-US"),
        Language("pt", "Portuguese", "pt-PT"),
        Language("de", "German", "de-DE"),
        Language("it", "Italian", "it-IT"),
        Language("ru", "Russian", "ru-RU"),
        Language("zh", "Chinese", "zh-CN"),
        Language("ja", "Japanese", "ja-JP"),
        Language("hi", "Hindi", "hi-IN"),
    )
}


def require_language(code: str) -> Language:
    language = LANGUAGES.get((code or "").lower())
    if not language:
        raise ValueError(f"Unsupported language: {code}")
    return language


def deepl_code(code: str, target: bool = False) -> str:
    # DeepL wants upper-case codes and has no plain "PT" target.
    upper = code.upper()
    if target and upper == "PT":
        return "PT-PT"
    return upper
