# app/utils/templates.py
from html import escape

from app.core.config import settings


def _layout(heading: str, content: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: 'Arial', sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .footer {{ margin-top: 30px; font-size: 12px; color: #888; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h2>{escape(heading)}</h2>
            {content}
            <p class="footer">{escape(settings.app_name)}</p>
        </div>
    </body>
    </html>
    """


def render_post_creation_email(name: str, title: str) -> str:
    return _layout(
        "New Post",
        f"<p>Hi {escape(name)},</p>"
        f"<p>Your post <strong>{escape(title)}</strong> has been created. "
        "It will be visible to others once an administrator approves it.</p>",
    )


def render_post_approval_email(name: str, title: str) -> str:
    return _layout(
        "Post Approved",
        f"<p>Hi {escape(name)},</p>"
        f"<p>Your post <strong>{escape(title)}</strong> has been approved "
        "and is now listed publicly.</p>",
    )


def render_post_deactivation_email(name: str, title: str) -> str:
    return _layout(
        "Post Deactivated",
        f"<p>Hi {escape(name)},</p>"
        f"<p>Your post <strong>{escape(title)}</strong> has been deactivated "
        "following a review of reports against it.</p>",
    )


def render_report_creation_email(name: str, reason: str, post_title: str) -> str:
    return _layout(
        "New Report",
        f"<p>Hi {escape(name)},</p>"
        f"<p>We received your report about <strong>{escape(post_title)}</strong>:</p>"
        f"<blockquote>{escape(reason)}</blockquote>"
        "<p>An administrator will review it shortly.</p>",
    )
