# =============================================================================
# tests/test_templates.py - Contact Email Template Tests
# =============================================================================

import re
from datetime import datetime

import pytest

from app.schemas.contactSchema import SanitizedContactForm
from app.services.ContactEmailTemplates import (
    NEXT_STEPS,
    build_contact_messages,
    format_received,
    generate_message_id,
    generate_reference,
    render_owner_email,
    render_user_email,
)


@pytest.fixture
def form():
    return SanitizedContactForm(
        name="Jane Q. Doe",
        email="jane@example.com",
        subject="Website redesign",
        message="Let&#x27;s build something great together.",
    )


class TestIdentifiers:
    """Test the cosmetic identifiers embedded in the emails."""

    def test_message_id_shape(self):
        assert re.fullmatch(r"\d{13,}-[0-9a-z]{9}", generate_message_id())

    def test_reference_shape(self):
        assert re.fullmatch(r"VYZ-\d{6}", generate_reference())

    def test_received_format(self):
        moment = datetime(2024, 1, 15, 15, 45)
        assert format_received(moment) == "Monday, January 15, 2024 at 03:45 PM"


class TestOwnerEmail:
    """Test the lead notification for the site operator."""

    def test_subject_prefixed(self, form):
        assert render_owner_email(form).subject == "🎯 New Portfolio Lead: Website redesign"

    def test_body_contains_form_fields(self, form):
        rendered = render_owner_email(form, received_at=datetime(2024, 1, 15, 15, 45))
        for value in (form.name, form.email, form.subject, form.message):
            assert value in rendered.html
            assert value in rendered.text
        assert "Monday, January 15, 2024 at 03:45 PM" in rendered.html

    def test_fields_are_not_escaped_again(self, form):
        rendered = render_owner_email(form)
        assert "Let&#x27;s" in rendered.html
        assert "&amp;#x27;" not in rendered.html

    def test_reply_shortcut_greets_first_name(self, form):
        rendered = render_owner_email(form)
        assert "mailto:jane@example.com?subject=Re%3A%20Website%20redesign&body=Hi%20Jane%2C" in rendered.html

    def test_reply_shortcut_is_url_encoded(self):
        form = SanitizedContactForm(
            name="Jane Doe",
            email="jane@example.com",
            subject="Q&amp;A &#x2F; pricing",
            message="0123456789",
        )

        rendered = render_owner_email(form)

        assert "subject=Re%3A%20Q%26amp%3BA%20%26%23x2F%3B%20pricing&body=" in rendered.html
        assert "subject=Re: " not in rendered.html

    def test_client_ip_only_in_text_when_known(self, form):
        assert "IP: 203.0.113.9" in render_owner_email(form, client_ip="203.0.113.9").text
        assert "IP:" not in render_owner_email(form).text


class TestUserEmail:
    """Test the acknowledgment sent to the submitter."""

    def test_greets_first_name(self, form):
        rendered = render_user_email(form)
        assert "Hi Jane," in rendered.html
        assert "Hi Jane," in rendered.text

    def test_restates_subject_and_reference(self, form):
        rendered = render_user_email(form)
        assert "Website redesign" in rendered.html
        assert re.search(r"VYZ-\d{6}", rendered.html)

    def test_next_steps_in_order(self, form):
        html = render_user_email(form).html
        positions = [html.index(title) for title, _ in NEXT_STEPS]
        assert positions == sorted(positions)
        assert len(NEXT_STEPS) == 4

    def test_subject(self, form):
        assert render_user_email(form).subject == "🎉 Thank You for Contacting VYZ Portfolio!"


class TestBuildContactMessages:
    """Test composition of the two outbound messages."""

    def test_addresses(self, form):
        owner, user = build_contact_messages(
            form, sender="portfolio@vyzx.live", operator="owner@vyzx.live", client_ip="198.51.100.1"
        )
        assert owner.sender == user.sender == "portfolio@vyzx.live"
        assert owner.to == "owner@vyzx.live"
        assert owner.reply_to == "jane@example.com"
        assert user.to == "jane@example.com"
        assert user.reply_to is None
        assert "IP: 198.51.100.1" in owner.text

    def test_single_word_name(self):
        form = SanitizedContactForm(name="Cher", email="c@d.io", subject="Hey", message="0123456789")
        _, user = build_contact_messages(form, sender="a@b.co", operator="o@b.co")
        assert "Hi Cher," in user.text
