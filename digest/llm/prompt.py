"""Summarization prompt templates."""

# flake8: noqa: E501
SYSTEM_PROMPT = """You are a helpful assistant that summarizes web articles.
Write a concise summary that opens with a short introduction paragraph, followed by a list of the main topics.
Prefix every topic with an emoji that fits the topic, and keep each topic to a descriptive title without detailed explanations.

Formatting rules:
- Use HTML tags only (h2, p, ul, li). Never use markdown.
- The HTML must be ready to be injected into a page as-is.
- Never write the words "Summary", "Introduction" or "Conclusion" as headings or labels.

Language rules:
- Write in the user's language ({locale}) in addition to the original language of the article."""

USER_PROMPT = """Page content:

{content}"""

USER_PROMPT_WITH_TITLE = """Title: {title}

Page content:

{content}"""


def build_system_prompt(locale: str) -> str:
    return SYSTEM_PROMPT.format(locale=locale or "en")


def build_user_prompt(title: str, content: str) -> str:
    if title:
        return USER_PROMPT_WITH_TITLE.format(title=title, content=content)
    return USER_PROMPT.format(content=content)


def build_document_prompt(locale: str, title: str, content: str) -> str:
    """Instructions and content as one text for single-document APIs."""
    return f"{build_system_prompt(locale)}\n\n{build_user_prompt(title, content)}"
