"""
Newsletter drafting.

The body comes from a fixed template unless a DeepSeek key is configured,
in which case the model writes it and the template is the fallback.
"""

import html
import logging
from datetime import datetime
from typing import Optional, Tuple

from alumni_network.core.config import get_settings
from alumni_network.services.deepseek_client import get_deepseek_client

settings = get_settings()
logger = logging.getLogger(__name__)


HTML_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px; }}
    p {{ margin-bottom: 15px; }}
  </style>
</head>
<body>
  {paragraphs}
</body>
</html>"""


def default_title(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"Newsletter for {now.strftime('%B')} {now.year}"


def template_content(ai_prompt: str) -> str:
    return (
        "Dear Alumni,\n\n"
        "We are excited to share the latest updates from our university community.\n\n"
        f"[Based on prompt: {ai_prompt}]\n\n"
        "This newsletter includes recent achievements, upcoming events, and stories from our "
        "alumni network. Stay connected and engaged with your alma mater.\n\n"
        "Best regards,\n"
        "University Communications Team"
    )


def render_html(content: str) -> str:
    """Wrap each blank-line separated paragraph, escaped, in <p> inside a styled page."""
    paragraphs = "\n".join(f"<p>{html.escape(p)}</p>" for p in content.split("\n\n"))
    return HTML_PAGE.format(paragraphs=paragraphs)


def compose_newsletter(ai_prompt: str) -> Tuple[str, str]:
    """Return (content, html_content) for a prompt."""
    content = None
    if settings.deepseek_api_key:
        try:
            content = get_deepseek_client().draft_newsletter(ai_prompt)
        except Exception as e:
            logger.warning("DeepSeek newsletter draft failed, using template: %s", e)

    if not content:
        content = template_content(ai_prompt)

    return content, render_html(content)
