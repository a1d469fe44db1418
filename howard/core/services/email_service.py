"""Outbound email over SMTP (sign-in links, invitations)."""

import os
import ssl
import smtplib
from html import escape
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

from core.utils.logging_config import get_logger

logger = get_logger('howard.email')


def get_smtp_config() -> dict:
    """SMTP settings from the environment."""
    return {
        'host': os.environ.get('SMTP_HOST', ''),
        'port': int(os.environ.get('SMTP_PORT', '587') or 587),
        'use_tls': os.environ.get('SMTP_TLS', 'true').lower() == 'true',
        'username': os.environ.get('SMTP_USERNAME', ''),
        'password': os.environ.get('SMTP_PASSWORD', ''),
        'from_email': os.environ.get('SMTP_FROM', ''),
        'from_name': os.environ.get('SMTP_FROM_NAME', 'Howard'),
    }


def is_smtp_configured() -> bool:
    config = get_smtp_config()
    return bool(config['host'] and config['from_email'])


def send_email(
    to_email: str,
    subject: str,
    html_body: str,
    text_body: Optional[str] = None,
) -> tuple[bool, str]:
    """Send one message.

    Returns:
        (success, error_message)
    """
    config = get_smtp_config()

    if not config['host']:
        return False, 'SMTP host not configured'
    if not config['from_email']:
        return False, 'From email not configured'

    msg = MIMEMultipart('alternative')
    msg['Subject'] = subject
    msg['From'] = f"{config['from_name']} <{config['from_email']}>" if config['from_name'] else config['from_email']
    msg['To'] = to_email
    if text_body:
        msg.attach(MIMEText(text_body, 'plain'))
    msg.attach(MIMEText(html_body, 'html'))

    try:
        with smtplib.SMTP(config['host'], config['port'], timeout=30) as server:
            if config['use_tls']:
                server.starttls(context=ssl.create_default_context())
            if config['username'] and config['password']:
                server.login(config['username'], config['password'])
            server.sendmail(config['from_email'], [to_email], msg.as_string())
    except smtplib.SMTPAuthenticationError as e:
        error_msg = f'SMTP authentication failed: {e}'
        logger.error(error_msg)
        return False, error_msg
    except (smtplib.SMTPException, OSError) as e:
        error_msg = f'SMTP error: {e}'
        logger.error(error_msg)
        return False, error_msg

    logger.info(f'Email sent to {to_email}: {subject}')
    return True, ''


def send_magic_link_email(to_email: str, link: str, full_name: Optional[str] = None) -> tuple[bool, str]:
    greeting = f'Hi {full_name},' if full_name else 'Hi,'
    html_body = f'''
    <p>{escape(greeting)}</p>
    <p>Use the button below to sign in to Howard. The link can be used once and expires soon.</p>
    <p><a href="{escape(link, quote=True)}" style="display:inline-block;padding:10px 18px;background:#0f172a;color:#fff;border-radius:6px;text-decoration:none">Sign in</a></p>
    <p style="color:#64748b;font-size:12px">If you did not request this email you can ignore it.</p>
    '''
    text_body = f'{greeting}\n\nSign in to Howard: {link}\n\nIf you did not request this email you can ignore it.'
    return send_email(to_email, 'Your Howard sign-in link', html_body, text_body)
