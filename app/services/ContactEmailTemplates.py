"""
Email templates for contact form submissions.

Two messages are rendered per submission: a lead notification for the site
operator and an acknowledgment for the person who filled in the form. Form
values are interpolated as-is because they were escaped by the sanitizer.
"""

import random
import string
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple
from urllib.parse import quote

from app.constants.constants import REFERENCE_PREFIX, SITE_NAME
from app.schemas.contactSchema import OutboundMessage, SanitizedContactForm

BASE36_DIGITS = string.digits + string.ascii_lowercase

NEXT_STEPS = (
    (
        "Immediate Review",
        "Our team is already reviewing your project requirements and will get back to you within 24 hours.",
    ),
    (
        "Initial Consultation",
        "We'll schedule a free discovery call to understand your vision and requirements in detail.",
    ),
    (
        "Project Proposal",
        "You'll receive a detailed proposal with timeline, deliverables, and investment details.",
    ),
    (
        "Kick-off & Development",
        "Once approved, we'll start bringing your vision to life with regular updates.",
    ),
)


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def generate_message_id() -> str:
    """Cosmetic identifier shown in the operator email footer. Not unique."""
    suffix = "".join(random.choices(BASE36_DIGITS, k=9))
    return f"{_epoch_millis()}-{suffix}"


def generate_reference() -> str:
    """Short reference quoted back to the submitter."""
    return f"{REFERENCE_PREFIX}-{str(_epoch_millis())[-6:]}"


def format_received(moment: datetime) -> str:
    return moment.strftime("%A, %B %d, %Y at %I:%M %p")


def format_submitted(moment: datetime) -> str:
    return moment.strftime("%b %d, %Y, %I:%M %p")


def render_owner_email(
    form: SanitizedContactForm,
    received_at: Optional[datetime] = None,
    client_ip: Optional[str] = None,
) -> RenderedEmail:
    """Render the lead notification sent to the site operator."""
    received = format_received(received_at or datetime.now())
    message_id = generate_message_id()
    reply_href = (
        f"mailto:{form.email}?subject={quote('Re: ' + form.subject)}"
        f"&body={quote('Hi ' + form.first_name + ',')}"
    )

    html_content = f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>New Contact Form Submission</title>
    <style>
        body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; line-height: 1.6; color: #333; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); padding: 20px; }}
        .email-container {{ max-width: 600px; margin: 0 auto; background: white; border-radius: 20px; overflow: hidden; }}
        .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 40px 30px; text-align: center; }}
        .content {{ padding: 40px 30px; }}
        .notification-badge {{ background: linear-gradient(135deg, #ff6b6b 0%, #ee5a24 100%); color: white; padding: 8px 16px; border-radius: 20px; font-size: 12px; font-weight: 600; display: inline-block; margin-bottom: 20px; }}
        .lead-info {{ background: #f8f9fa; padding: 25px; border-radius: 15px; border-left: 4px solid #667eea; margin-bottom: 30px; }}
        .info-label {{ font-size: 12px; font-weight: 600; color: #666; text-transform: uppercase; letter-spacing: 0.5px; }}
        .info-value {{ font-size: 16px; font-weight: 600; color: #333; }}
        .message-content {{ background: #f8f9fa; padding: 15px; border-radius: 8px; border-left: 3px solid #667eea; font-size: 14px; line-height: 1.8; white-space: pre-wrap; }}
        .cta-button {{ display: inline-block; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 14px 32px; text-decoration: none; border-radius: 25px; font-weight: 600; margin: 20px 0; }}
        .footer {{ background: #f8f9fa; padding: 25px 30px; text-align: center; border-top: 1px solid #e9ecef; }}
        .timestamp {{ font-size: 12px; color: #666; margin-top: 15px; }}
    </style>
</head>
<body>
    <div class="email-container">
        <div class="header">
            <h1>🚀 New Lead Alert!</h1>
            <p>Someone just contacted you through your portfolio</p>
        </div>
        <div class="content">
            <div class="notification-badge">🔥 HIGH PRIORITY - RESPOND WITHIN 24H</div>
            <div class="lead-info">
                <h2 style="color: #333; margin-bottom: 20px;">Contact Details</h2>
                <p><span class="info-label">👤 Full Name</span><br><span class="info-value">{form.name}</span></p>
                <p><span class="info-label">📧 Email Address</span><br>
                    <span class="info-value"><a href="mailto:{form.email}" style="color: #667eea; text-decoration: none;">{form.email}</a></span></p>
                <p><span class="info-label">🎯 Subject</span><br><span class="info-value">{form.subject}</span></p>
                <p><span class="info-label">⏰ Received</span><br><span class="info-value">{received}</span></p>
            </div>
            <div class="message-section">
                <span class="info-label">💬 Message Content</span>
                <div class="message-content">{form.message}</div>
            </div>
            <center>
                <a href="{reply_href}" class="cta-button">✨ Reply Now</a>
            </center>
        </div>
        <div class="footer">
            <p style="color: #666;">This message was sent automatically from your portfolio contact form.</p>
            <div class="timestamp">Message ID: {message_id}</div>
        </div>
    </div>
</body>
</html>
"""

    text_lines = [
        "NEW CONTACT FORM SUBMISSION",
        "-" * 27,
        f"Name: {form.name}",
        f"Email: {form.email}",
        f"Subject: {form.subject}",
        f"Message: {form.message}",
        "-" * 27,
        f"Received: {received}",
    ]
    if client_ip:
        text_lines.append(f"IP: {client_ip}")

    return RenderedEmail(
        subject=f"🎯 New Portfolio Lead: {form.subject}",
        html=html_content.strip(),
        text="\n".join(text_lines),
    )


def render_user_email(
    form: SanitizedContactForm,
    submitted_at: Optional[datetime] = None,
) -> RenderedEmail:
    """Render the acknowledgment sent back to the submitter."""
    submitted = format_submitted(submitted_at or datetime.now())
    reference = generate_reference()

    steps_html = "\n".join(
        f"""
                    <li class="step-item">
                        <div class="step-icon">{number}</div>
                        <div class="step-content">
                            <h3>{title}</h3>
                            <p>{description}</p>
                        </div>
                    </li>"""
        for number, (title, description) in enumerate(NEXT_STEPS, start=1)
    )

    html_content = f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Thank You for Contacting {SITE_NAME}</title>
    <style>
        body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; line-height: 1.6; color: #333; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); padding: 20px; }}
        .email-container {{ max-width: 600px; margin: 0 auto; background: white; border-radius: 20px; overflow: hidden; }}
        .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 50px 30px; text-align: center; }}
        .content {{ padding: 50px 30px; }}
        .greeting {{ font-size: 24px; color: #333; margin-bottom: 30px; font-weight: 600; }}
        .thank-you-message {{ background: linear-gradient(135deg, #f093fb 0%, #f5576c 100%); color: white; padding: 25px; border-radius: 15px; text-align: center; margin-bottom: 30px; }}
        .confirmation-details {{ background: #f8f9fa; padding: 25px; border-radius: 15px; border-left: 4px solid #667eea; margin-bottom: 30px; }}
        .detail-label {{ font-size: 12px; font-weight: 600; color: #666; text-transform: uppercase; letter-spacing: 0.5px; }}
        .detail-value {{ font-size: 16px; font-weight: 600; color: #333; }}
        .next-steps {{ background: white; border: 2px solid #e9ecef; border-radius: 12px; padding: 25px; margin: 30px 0; }}
        .steps-list {{ list-style: none; padding: 0; }}
        .step-item {{ display: flex; align-items: flex-start; gap: 15px; margin-bottom: 20px; padding: 15px; background: #f8f9fa; border-radius: 10px; }}
        .step-icon {{ background: #667eea; color: white; width: 40px; height: 40px; border-radius: 50%; display: flex; align-items: center; justify-content: center; flex-shrink: 0; }}
        .footer {{ background: #2d3748; color: white; padding: 30px; text-align: center; }}
        .copyright {{ font-size: 12px; color: #a0aec0; margin-top: 20px; }}
    </style>
</head>
<body>
    <div class="email-container">
        <div class="header">
            <span style="font-size: 48px;">🎉</span>
            <h1>Thank You, {form.name}!</h1>
            <p>Your message has been received successfully</p>
        </div>
        <div class="content">
            <div class="greeting">Hi {form.first_name},</div>
            <div class="thank-you-message">
                <h2>✨ Welcome to the {REFERENCE_PREFIX} Family!</h2>
                <p>We're thrilled that you've taken the first step toward your next amazing project.</p>
            </div>
            <div class="confirmation-details">
                <h3 style="color: #333; margin-bottom: 20px;">📋 Message Confirmation</h3>
                <p><span class="detail-label">Message ID</span><br><span class="detail-value">{reference}</span></p>
                <p><span class="detail-label">Submitted On</span><br><span class="detail-value">{submitted}</span></p>
                <p><span class="detail-label">Subject</span><br><span class="detail-value">{form.subject}</span></p>
                <p><span class="detail-label">Priority</span><br><span class="detail-value" style="color: #48bb78;">⭐ High Priority</span></p>
            </div>
            <div class="next-steps">
                <h2 style="text-align: center;">🚀 What Happens Next?</h2>
                <ul class="steps-list">{steps_html}
                </ul>
            </div>
            <p style="color: #666; text-align: center;">
                <strong>Need immediate assistance?</strong><br>
                Feel free to reply directly to this email.
            </p>
        </div>
        <div class="footer">
            <p style="font-size: 14px;">Thank you for considering {SITE_NAME} for your project needs.</p>
            <div class="copyright">© {datetime.now().year} {SITE_NAME}. All rights reserved.<br>Transforming ideas into digital reality.</div>
        </div>
    </div>
</body>
</html>
"""

    text_content = f"""
Thank you for contacting {SITE_NAME}!

Hi {form.first_name},

We've received your message and will get back to you within 24 hours.

Message Details:
• Reference: {reference}
• Subject: {form.subject}
• Submitted: {submitted}

We're excited to discuss your project!

Best regards,
{REFERENCE_PREFIX} Team
"""

    return RenderedEmail(
        subject=f"🎉 Thank You for Contacting {SITE_NAME}!",
        html=html_content.strip(),
        text=text_content.strip(),
    )


def build_contact_messages(
    form: SanitizedContactForm,
    sender: str,
    operator: str,
    client_ip: Optional[str] = None,
) -> Tuple[OutboundMessage, OutboundMessage]:
    """
    Compose the operator notification and the submitter acknowledgment.

    Args:
        form: Validated, sanitized form data.
        sender: From address for both messages.
        operator: Site operator address receiving the lead.
        client_ip: Submitter IP, included in the operator plaintext body.

    Returns:
        (operator message, acknowledgment message)
    """
    now = datetime.now()
    owner = render_owner_email(form, received_at=now, client_ip=client_ip)
    user = render_user_email(form, submitted_at=now)

    owner_message = OutboundMessage(
        sender=sender,
        to=operator,
        reply_to=form.email,
        subject=owner.subject,
        html=owner.html,
        text=owner.text,
    )
    user_message = OutboundMessage(
        sender=sender,
        to=form.email,
        subject=user.subject,
        html=user.html,
        text=user.text,
    )
    return owner_message, user_message
