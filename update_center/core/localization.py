from typing import Mapping, Optional


def resolve_description(
    default_text: str, i18n: Optional[Mapping[str, str]], language: Optional[str]
) -> str:
    """Exact locale match from ``i18n``, else the default text ("zh" never matches "zh-CN")."""
    if language and i18n:
        localized = i18n.get(language)
        if localized:
            return localized
    return default_text
