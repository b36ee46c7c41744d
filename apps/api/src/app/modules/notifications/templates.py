"""
Email Templates

HTML templates for welcome, password reset, announcement and bulk emails.
Every user-supplied value is HTML-escaped before interpolation.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Any

from app.core.config import settings

SYSTEM_NAME = "School Management System"

ADMIN_FEATURES = (
    "Sign in to your dashboard using the credentials above",
    "Complete your school profile setup",
    "Add your first students and teachers",
    "Explore all the features available in your plan",
)
TEACHER_FEATURES = (
    "Manage your classes and students",
    "Take attendance and track student progress",
    "Communicate with students and parents",
    "Post announcements to your school",
)
STUDENT_FEATURES = (
    "View your class and timetable",
    "Check attendance records",
    "Read school announcements",
    "Communicate with teachers",
)
PARENT_FEATURES = (
    "Monitor your child's attendance",
    "Receive important school announcements",
    "Communicate with teachers and school staff",
)


@dataclass
class RenderedEmail:
    subject: str
    html: str


def _login_url() -> str:
    return f"{settings.frontend_url.rstrip('/')}/auth/login"


def _multiline(text: str) -> str:
    """Escape text and keep its line breaks."""
    return escape(text).replace("\r\n", "\n").replace("\n", "<br>")


def _layout(heading: str, tagline: str, body: str, footer: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ text-align: center; margin-bottom: 30px; }}
            .header h1 {{ color: #16a34a; margin-bottom: 10px; }}
            .tagline {{ color: #666; font-size: 16px; }}
            .card {{ background: #f8f9fa; padding: 20px; border-radius: 8px; margin-bottom: 20px; }}
            .notice {{ background: #fff3cd; border: 1px solid #ffeaa7; padding: 15px; border-radius: 6px; margin-bottom: 20px; color: #856404; }}
            .button {{ display: inline-block; background: #16a34a; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; }}
            .footer {{ margin-top: 30px; padding-top: 20px; border-top: 1px solid #eee; text-align: center; color: #666; font-size: 14px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>{heading}</h1>
                <p class="tagline">{tagline}</p>
            </div>
            {body}
            <div class="footer">
                {footer}
                <p>{SYSTEM_NAME}</p>
            </div>
        </div>
    </body>
    </html>
    """


def _full_name(user: Any) -> str:
    profile = getattr(user, "profile", None) or {}
    return escape(f"{profile.get('first_name', '')} {profile.get('last_name', '')}".strip())


def _credentials(temp_password: str | None) -> str:
    if not temp_password:
        return ""
    return f"<p><strong>Temporary Password:</strong> {escape(temp_password)}</p>"


def _features(title: str, items: Sequence[str]) -> str:
    lines = "".join(f"<li>{item}</li>" for item in items)
    return f"<h3>{title}</h3><ul>{lines}</ul>"


def _button(label: str, url: str) -> str:
    return f'<p style="text-align: center; margin-top: 30px;"><a href="{escape(url)}" class="button">{label}</a></p>'


def welcome_school_admin(user: Any, school: Any, temp_password: str | None = None) -> RenderedEmail:
    school_name = escape(school.name)
    body = f"""
            <div class="card">
                <h2>Account Details</h2>
                <p><strong>Name:</strong> {_full_name(user)}</p>
                <p><strong>Email:</strong> {escape(user.email)}</p>
                <p><strong>Role:</strong> School Administrator</p>
                <p><strong>School:</strong> {school_name}</p>
                {_credentials(temp_password)}
            </div>
            {_features("Getting Started", ADMIN_FEATURES)}
            {_button("Sign In to Dashboard", _login_url())}
    """
    return RenderedEmail(
        subject=f"Welcome to {school.name} - {SYSTEM_NAME}",
        html=_layout(
            f"Welcome to {SYSTEM_NAME}",
            "Your school account has been created successfully!",
            body,
            "<p>Need help? Reply to this email to reach our support team.</p>",
        ),
    )


def welcome_teacher(user: Any, school: Any, temp_password: str | None = None) -> RenderedEmail:
    school_name = escape(school.name)
    body = f"""
            <div class="card">
                <h2>Account Details</h2>
                <p><strong>Name:</strong> {_full_name(user)}</p>
                <p><strong>Email:</strong> {escape(user.email)}</p>
                <p><strong>Role:</strong> Teacher</p>
                <p><strong>School:</strong> {school_name}</p>
                <p><strong>Employee ID:</strong> {escape(user.employee_id or "Will be assigned")}</p>
                {_credentials(temp_password)}
            </div>
            {_features("What You Can Do", TEACHER_FEATURES)}
            {_button("Access Teacher Portal", _login_url())}
    """
    return RenderedEmail(
        subject=f"Welcome to {school.name} - Teacher Portal",
        html=_layout(
            f"Welcome to {school_name}",
            "Your teacher account has been created!",
            body,
            "<p>Questions? Contact your school administrator.</p>",
        ),
    )


def welcome_student(
    user: Any,
    school: Any,
    temp_password: str | None = None,
    parent_emails: Sequence[str] = (),
) -> RenderedEmail:
    school_name = escape(school.name)
    parents = escape(", ".join(parent_emails)) if parent_emails else "Not linked yet"
    body = f"""
            <div class="card">
                <h2>Student Details</h2>
                <p><strong>Name:</strong> {_full_name(user)}</p>
                <p><strong>Email:</strong> {escape(user.email)}</p>
                <p><strong>Student ID:</strong> {escape(user.admission_number or "Will be assigned")}</p>
                <p><strong>School:</strong> {school_name}</p>
                {_credentials(temp_password)}
            </div>
            {_features("Student Portal Features", STUDENT_FEATURES)}
            {_button("Access Student Portal", _login_url())}
    """
    return RenderedEmail(
        subject=f"Welcome to {school.name} - Student Portal",
        html=_layout(
            f"Welcome to {school_name}",
            "Your student account has been created!",
            body,
            f"<p>Parents/Guardians: {parents}</p>"
            "<p>Questions? Contact your teachers or school administration.</p>",
        ),
    )


def welcome_parent(
    user: Any,
    school: Any,
    temp_password: str | None = None,
    children_names: Sequence[str] = (),
) -> RenderedEmail:
    school_name = escape(school.name)
    children = escape(", ".join(children_names)) if children_names else "Not linked yet"
    body = f"""
            <div class="card">
                <h2>Account Details</h2>
                <p><strong>Name:</strong> {_full_name(user)}</p>
                <p><strong>Email:</strong> {escape(user.email)}</p>
                <p><strong>Role:</strong> Parent/Guardian</p>
                <p><strong>School:</strong> {school_name}</p>
                <p><strong>Children:</strong> {children}</p>
                {_credentials(temp_password)}
            </div>
            {_features("Parent Portal Features", PARENT_FEATURES)}
            {_button("Access Parent Portal", _login_url())}
    """
    return RenderedEmail(
        subject=f"Welcome to {school.name} - Parent Portal",
        html=_layout(
            f"Welcome to {school_name}",
            "Your parent account has been created!",
            body,
            "<p>Stay connected with your child's education journey!</p>",
        ),
    )


WelcomeTemplate = Callable[..., RenderedEmail]

# Unlisted roles (staff, sub-admins) receive the teacher template.
WELCOME_TEMPLATES: dict[str, WelcomeTemplate] = {
    "school_admin": welcome_school_admin,
    "teacher": welcome_teacher,
    "student": welcome_student,
    "parent": welcome_parent,
}


def welcome_template_for(role: str) -> WelcomeTemplate:
    return WELCOME_TEMPLATES.get(role, welcome_teacher)


def password_reset(user: Any, reset_link: str) -> RenderedEmail:
    first_name = escape((getattr(user, "profile", None) or {}).get("first_name", ""))
    safe_link = escape(reset_link)
    body = f"""
            <div class="card">
                <p>Hello {first_name},</p>
                <p>You requested to reset your password for your {SYSTEM_NAME} account. Click the button below to create a new password:</p>
            </div>
            {_button("Reset Password", reset_link)}
            <div class="notice">
                <p><strong>Security Note:</strong> This link will expire in 1 hour. If you didn't request this password reset, please ignore this email.</p>
            </div>
    """
    return RenderedEmail(
        subject=f"Password Reset Request - {SYSTEM_NAME}",
        html=_layout(
            "Password Reset Request",
            "We received a request to reset your password",
            body,
            "<p>If you're having trouble clicking the button, copy and paste this URL into your browser:</p>"
            f'<p style="word-break: break-all;">{safe_link}</p>',
        ),
    )


def announcement(announcement: Any, school: Any, recipient_name: str) -> RenderedEmail:
    posted: datetime | None = announcement.publish_date or announcement.created_at
    priority = getattr(announcement.priority, "value", announcement.priority) or "Normal"

    attachments = ""
    if announcement.attachments:
        items = "".join(
            f'<li><a href="{escape(a.get("url", ""))}">{escape(a.get("name", ""))}</a></li>'
            for a in announcement.attachments
        )
        attachments = f"<div><h3>Attachments</h3><ul>{items}</ul></div>"

    body = f"""
            <div class="card">
                <h2>{escape(announcement.title)}</h2>
                <p>
                    <strong>Date:</strong> {posted.strftime("%B %d, %Y") if posted else ""}<br>
                    <strong>Priority:</strong> {escape(str(priority).capitalize())}
                </p>
                <div>{_multiline(announcement.content)}</div>
            </div>
            {attachments}
    """
    return RenderedEmail(
        subject=f"{school.name} - {announcement.title}",
        html=_layout(
            escape(school.name),
            "School Announcement",
            body,
            f"<p>This announcement was sent to: {escape(recipient_name)}</p>",
        ),
    )


def bulk_notification(subject: str, content: str, school: Any, recipient_name: str) -> RenderedEmail:
    body = f"""
            <div class="card">
                <p>Dear {escape(recipient_name)},</p>
                <div>{_multiline(content)}</div>
            </div>
    """
    return RenderedEmail(
        subject=subject,
        html=_layout(
            escape(school.name),
            "Important Notification",
            body,
            "<p>This message was sent by your school administration.</p>",
        ),
    )
