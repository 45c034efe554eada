# services/notifications.py
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from flask import current_app

from .errors import DependencyUnavailable


UNCONFIGURED_MSG = "Email service is not configured properly. Please contact administrator."


class Message:
    def __init__(self, recipient, subject, html):
        self.recipient = recipient
        self.subject = subject
        self.html = html

    def __repr__(self):
        return f"<Message to={self.recipient} subject={self.subject!r}>"


class SmtpNotifier:
    """Delivers account emails over SMTP with STARTTLS."""

    def __init__(self, host, port, user, password, sender_name):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender_name = sender_name

    @classmethod
    def from_config(cls, cfg):
        return cls(
            host=cfg["EMAIL_HOST"],
            port=cfg["EMAIL_PORT"],
            user=cfg["EMAIL_USER"],
            password=cfg["EMAIL_PASSWORD"],
            sender_name=cfg["EMAIL_SENDER_NAME"],
        )

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    def _connect(self):
        server = smtplib.SMTP(self.host, self.port, timeout=10)
        server.starttls()
        server.login(self.user, self.password)
        return server

    def is_available(self) -> bool:
        """Credentials are set and the SMTP server accepts them."""
        if not self.configured:
            current_app.logger.warning("Email credentials are not configured")
            return False
        try:
            server = self._connect()
            server.quit()
        except (smtplib.SMTPException, OSError) as e:
            current_app.logger.warning("Email configuration error: %s", e)
            return False
        return True

    def send(self, message: Message):
        if not self.configured:
            raise DependencyUnavailable(UNCONFIGURED_MSG)

        msg = MIMEMultipart()
        msg["From"] = formataddr((self.sender_name, self.user))
        msg["To"] = message.recipient
        msg["Subject"] = message.subject
        msg.attach(MIMEText(message.html, "html"))

        try:
            server = self._connect()
            try:
                server.send_message(msg)
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            current_app.logger.warning("Email to %s failed: %s", message.recipient, e)
            raise DependencyUnavailable("Failed to send email", reason="email_delivery_failed") from e

        current_app.logger.info("Email '%s' sent to %s", message.subject, message.recipient)


_FOOTER = """
          <hr style="border: 1px solid #eee; margin: 20px 0;">
          <p style="color: #666; font-size: 12px;">This is an automated message, please do not reply.</p>
        </div>
"""


def _credentials_block(username, password):
    return f"""
          <ul>
            <li><strong>Username:</strong> {username}</li>
            <li><strong>Password:</strong> {password}</li>
          </ul>
"""


def welcome_message(email, username, password, frontend_url):
    login_url = f"{frontend_url}/login"
    html = f"""
        <div style="font-family: Arial, sans-serif; padding: 20px; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #333;">Welcome to Titan Dealer App!</h2>
          <p>Hello Dealer,</p>
          <p>Your account has been created. Your login credentials are:</p>
          {_credentials_block(username, password)}
          <p>Keep these credentials secure and do not share them with anyone.</p>
          <p>To login, visit: <a href="{login_url}">{login_url}</a></p>
          <p>If you did not request this account, contact support immediately.</p>
          {_FOOTER}
    """
    return Message(email, "Welcome to Titan Dealer App!", html)


def reset_link_message(email, token, frontend_url, ttl_minutes):
    reset_url = f"{frontend_url}/reset-password/{token}"
    html = f"""
        <div style="font-family: Arial, sans-serif; padding: 20px; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #333;">Password Reset Request</h2>
          <p>Hello,</p>
          <p>You have requested to reset your password. Click the button below to proceed:</p>
          <div style="text-align: center; margin: 30px 0;">
            <a href="{reset_url}"
               style="background-color: #4CAF50; color: white; padding: 12px 25px;
                      text-decoration: none; border-radius: 5px; display: inline-block;">
              Reset Password
            </a>
          </div>
          <p>If you didn't request this reset, please ignore this email.</p>
          <p>This link will expire in {ttl_minutes} minutes.</p>
          {_FOOTER}
    """
    return Message(email, "Password Reset Request", html)


def admin_reset_message(email, username, password):
    html = f"""
        <div style="font-family: Arial, sans-serif; padding: 20px; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #333;">Password Reset</h2>
          <p>Hello Dealer,</p>
          <p>Your password has been reset by the administrator. Your new login credentials are:</p>
          {_credentials_block(username, password)}
          <p>Please change this password after logging in.</p>
          {_FOOTER}
    """
    return Message(email, "Password Reset by Admin", html)
