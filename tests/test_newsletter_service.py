from datetime import datetime

from alumni_network.services import newsletter_service
from alumni_network.services.newsletter_service import (
    compose_newsletter, default_title, render_html, template_content
)


def test_default_title():
    assert default_title(datetime(2024, 11, 3)) == "Newsletter for November 2024"


def test_template_mentions_prompt():
    content = template_content("Reunion 2025")
    assert content.startswith("Dear Alumni,")
    assert "[Based on prompt: Reunion 2025]" in content
    assert content.endswith("University Communications Team")


def test_render_html_wraps_paragraphs():
    html = render_html("First.\n\nSecond.")
    assert "<p>First.</p>\n<p>Second.</p>" in html


def test_render_html_escapes_markup():
    html = render_html("<script>alert(1)</script>\n\nFish & Chips")
    assert "<script>" not in html
    assert "<p>&lt;script&gt;alert(1)&lt;/script&gt;</p>" in html
    assert "<p>Fish &amp; Chips</p>" in html


def test_compose_without_key_uses_template(monkeypatch):
    monkeypatch.setattr(newsletter_service.settings, "deepseek_api_key", "")
    content, html = compose_newsletter("Sports day")
    assert "[Based on prompt: Sports day]" in content
    assert "<p>Dear Alumni,</p>" in html


def test_compose_with_model(monkeypatch):
    class Client:
        def draft_newsletter(self, ai_prompt):
            return f"Dear Alumni,\n\nAll about {ai_prompt}."

    monkeypatch.setattr(newsletter_service.settings, "deepseek_api_key", "sk-test")
    monkeypatch.setattr(newsletter_service, "get_deepseek_client", lambda: Client())
    content, html = compose_newsletter("the hackathon")
    assert content == "Dear Alumni,\n\nAll about the hackathon."
    assert "<p>All about the hackathon.</p>" in html
