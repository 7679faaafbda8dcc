from __future__ import annotations

SUMMARY_PROMPT = """Analyze the following web page content and provide a concise accessibility-focused summary (2-3 sentences) that describes the main purpose and key content of the page:

Title: {title}
Content excerpt: {excerpt}...

Provide a clear, descriptive summary suitable for screen reader users."""

IMAGE_ALT_PROMPT = (
    "Generate a concise, descriptive alt text (1-2 sentences) for this image that would be useful "
    "for accessibility purposes. Focus on what is visually important and relevant to the page content. "
    'Do not include phrases like "image of" or "picture of".'
)

LINK_PROMPT = """You write link descriptions for screen reader users.

Page summary: {page_summary}
Link text: {link_text}
Link URL: {url}
Current title attribute: {current_title}

Describe in one short sentence where this link leads and what the user will find there.
Do not start with phrases like "link to" or "this link". Return only the description."""

BUTTON_PROMPT = """You write accessible labels for interactive controls.

Page summary: {page_summary}
Visible text: {button_text}
Current aria-label: {current_aria_label}
Surrounding text: {parent_context}

Write a short aria-label (2-8 words) that states what activating this control does.
Do not include the word "button". Return only the label."""


def build_summary_prompt(title: str, excerpt: str) -> str:
    return SUMMARY_PROMPT.format(title=title, excerpt=excerpt)


def build_link_prompt(page_summary: str, link_text: str, url: str, current_title: str) -> str:
    return LINK_PROMPT.format(
        page_summary=page_summary,
        link_text=link_text,
        url=url,
        current_title=current_title or "(none)",
    )


def build_button_prompt(page_summary: str, button_text: str, current_aria_label: str, parent_context: str) -> str:
    return BUTTON_PROMPT.format(
        page_summary=page_summary,
        button_text=button_text or "(no visible text)",
        current_aria_label=current_aria_label or "(none)",
        parent_context=parent_context or "(none)",
    )
