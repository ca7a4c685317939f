from fastapi import Request

from app.core.config import Settings
from app.services.MailDispatcher import MailDispatcher


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with."""
    return request.app.state.settings


def get_mail_dispatcher(request: Request) -> MailDispatcher:
    """Process-wide mail dispatcher created during startup."""
    return request.app.state.mail_dispatcher
