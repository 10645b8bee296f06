"""UI strings for the chat page, in Spanish and English."""
from typing import Dict

DEFAULT_LANGUAGE = "es"

LANGUAGES: Dict[str, str] = {"es": "Español", "en": "English"}

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "es": {
        "page.title": "Chatea con los artículos de biología espacial",
        "sidebar.title": "Conversaciones",
        "sidebar.signedInAs": "Sesión iniciada como {user}",
        "sidebar.newConversation": "Nueva conversación",
        "sidebar.noConversations": "No hay conversaciones",
        "sidebar.deleteConfirm": "¿Estás seguro de eliminar esta conversación?",
        "sidebar.delete": "Eliminar",
        "sidebar.cancel": "Cancelar",
        "sidebar.language": "Idioma",
        "messages.placeholder": "Escribe tu mensaje aquí...",
        "messages.searching": "Buscando en los artículos...",
        "messages.sources": "Fuentes ({count})",
        "report.title": "Resumen de Investigación",
        "report.empty": "Todavía no hay resumen.",
    },
    "en": {
        "page.title": "Chat with the space biology articles",
        "sidebar.title": "Conversations",
        "sidebar.signedInAs": "Signed in as {user}",
        "sidebar.newConversation": "New conversation",
        "sidebar.noConversations": "No conversations",
        "sidebar.deleteConfirm": "Are you sure you want to delete this conversation?",
        "sidebar.delete": "Delete",
        "sidebar.cancel": "Cancel",
        "sidebar.language": "Language",
        "messages.placeholder": "Type your message here...",
        "messages.searching": "Searching the articles...",
        "messages.sources": "Sources ({count})",
        "report.title": "Research Summary",
        "report.empty": "No report available yet.",
    },
}


def translate(language: str, key: str, **params) -> str:
    """Look up ``key`` for ``language``.

    Unknown languages fall back to the default one and unknown keys are
    returned as-is. ``{name}`` placeholders are filled from ``params``.
    """
    strings = TRANSLATIONS.get(language) or TRANSLATIONS[DEFAULT_LANGUAGE]
    text = strings.get(key, key)
    return text.format(**params) if params else text
