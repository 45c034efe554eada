# services/accounts.py
import re
import secrets
import string
from datetime import datetime, timedelta

from flask import current_app
from flask_jwt_extended import create_access_token
from sqlalchemy.exc import IntegrityError

from models.database import Account, AccountStatus
from .errors import AuthenticationError, DependencyUnavailable, NotFoundError, ValidationError
from .incidents import DEALER_CODE_RE
from .notifications import UNCONFIGURED_MSG, admin_reset_message, reset_link_message, welcome_message


PASSWORD_CHARSET = string.ascii_lowercase + string.ascii_uppercase + string.digits + "!@#$%^&*()"
PASSWORD_LENGTH = 8
PASSWORD_POLICY_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&#])[A-Za-z\d@$!%*?&#]{8,}$")
_MASK_RE = re.compile(r"(.{2})(.*)(?=@)")

INVALID_CREDENTIALS_MSG = "Invalid username or password"


def generate_password(length=PASSWORD_LENGTH):
    return "".join(secrets.choice(PASSWORD_CHARSET) for _ in range(length))


def generate_reset_token():
    return secrets.token_hex(32)


def mask_email(email):
    """Keep the first two characters of the local part, star out the rest.

    >>> mask_email("dealer@example.com")
    'de****@example.com'
    """
    return _MASK_RE.sub(lambda m: m.group(1) + "*" * len(m.group(2)), email, count=1)


class AccountService:
    """Login, credential issuance and the password-reset token lifecycle."""

    def __init__(self, session, notifier, cfg, clock=datetime.utcnow):
        self.session = session
        self.notifier = notifier
        self.cfg = cfg
        self.clock = clock

    # ------------------------------------------------------------------ lookups

    def get_account(self, username):
        if not username or not isinstance(username, str):
            return None
        return self.session.query(Account).filter_by(username=username).first()

    def list_accounts(self):
        return self.session.query(Account).order_by(Account.id).all()

    def is_admin(self, username) -> bool:
        return username == self.cfg["ADMIN_USERNAME"]

    # ------------------------------------------------------------------ login

    def authenticate(self, username, password):
        account = self.get_account(username)
        # Unknown user and wrong password look the same to the caller
        if not account or not account.check_password(password):
            raise AuthenticationError(INVALID_CREDENTIALS_MSG)

        if not account.is_active:
            current_app.logger.warning("Login rejected for inactive account %s", username)
            raise AuthenticationError("Username is inactive.", reason="inactive_account")

        role = "admin" if self.is_admin(account.username) else "dealer"
        return create_access_token(identity=account.username, additional_claims={"role": role})

    # ------------------------------------------------------------------ admin lifecycle

    def register_account(self, username, email, status=None):
        if not username or not email:
            raise ValidationError("Username and email are required")
        if not isinstance(username, str) or not isinstance(email, str):
            raise ValidationError("Username and email must be strings")

        parsed = AccountStatus.parse(status or AccountStatus.ACTIVE.value)
        if parsed is None:
            raise ValidationError(f"Unknown status '{status}'", reason="invalid_status")

        if self.cfg["STRICT_VALIDATION"] and not DEALER_CODE_RE.match(username):
            raise ValidationError("Username must be a 7-digit dealer code")

        if self.get_account(username):
            raise ValidationError("Username already registered", reason="duplicate_username")

        self._require_notifier()

        password = generate_password()
        account = Account(username=username, email=email, status=parsed.value)
        account.set_password(password)
        self.session.add(account)

        self._commit_after_delivery(
            welcome_message(email, username, password, self.cfg["FRONTEND_URL"])
        )
        current_app.logger.info("Registered account %s (%s)", username, parsed.value)
        return account

    def set_account_status(self, username, status):
        if not username or not status:
            raise ValidationError("Username and status are required")

        parsed = AccountStatus.parse(status)
        if parsed is None:
            raise ValidationError(f"Unknown status '{status}'", reason="invalid_status")

        if self.is_admin(username):
            raise ValidationError("The admin account status cannot be changed", reason="admin_status_locked")

        account = self.get_account(username)
        if not account:
            raise NotFoundError("User not found")

        account.status = parsed.value
        self.session.commit()
        current_app.logger.info("Account %s set to %s", username, parsed.value)
        return account

    def admin_reset_password(self, username):
        if not username:
            raise ValidationError("Username is required")

        self._require_notifier()

        account = self.get_account(username)
        if not account:
            raise NotFoundError("User not found")
        if not account.email:
            raise NotFoundError("User has no email configured")

        password = generate_password()
        account.set_password(password)

        self._commit_after_delivery(admin_reset_message(account.email, username, password))
        current_app.logger.info("Admin reset password for %s", username)
        return account

    def ensure_admin(self, password, email=None):
        """Create the admin account, or rotate its password if it exists."""
        username = self.cfg["ADMIN_USERNAME"]
        account = self.get_account(username)
        if account is None:
            account = Account(username=username, status=AccountStatus.ACTIVE.value)
            self.session.add(account)
        account.set_password(password)
        if email:
            account.email = email
        self.session.commit()
        return account

    # ------------------------------------------------------------------ reset tokens

    def request_password_reset(self, username):
        if not username:
            raise ValidationError("Username is required")

        self._require_notifier()

        account = self.get_account(username)
        if not account:
            raise NotFoundError("No user found with this username")
        if not account.email:
            raise NotFoundError("No email configured for this user", reason="email_not_configured")
        if not account.is_active:
            raise NotFoundError("User is inactive. Cannot access forget-password", reason="inactive_account")

        token = generate_reset_token()
        ttl = self.cfg["RESET_TOKEN_TTL_MINUTES"]
        # A newer request overwrites any outstanding token
        account.issue_reset_token(token, self.clock() + timedelta(minutes=ttl))

        self._commit_after_delivery(
            reset_link_message(account.email, token, self.cfg["FRONTEND_URL"], ttl)
        )
        current_app.logger.info("Password reset token issued for %s", username)
        return mask_email(account.email)

    def consume_password_reset(self, token, new_password):
        if not token or not new_password:
            raise ValidationError("Token and new password are required")
        if not isinstance(token, str) or not isinstance(new_password, str):
            raise ValidationError("Token and new password must be strings")

        account = (
            self.session.query(Account)
            .filter(Account.reset_password_token == token)
            .filter(Account.reset_password_expires > self.clock())
            .first()
        )
        if not account:
            raise ValidationError(
                "Password reset token is invalid or has expired", reason="invalid_or_expired_token"
            )

        if self.cfg["ENFORCE_PASSWORD_POLICY"] and not PASSWORD_POLICY_RE.match(new_password):
            raise ValidationError(
                "Password must be at least 8 characters long, include an uppercase letter, "
                "a lowercase letter, a number, and a special character",
                reason="weak_password",
            )

        account.set_password(new_password)
        account.clear_reset_token()
        self.session.commit()
        current_app.logger.info("Password reset completed for %s", account.username)
        return account

    # ------------------------------------------------------------------ helpers

    def _require_notifier(self):
        if not self.notifier.is_available():
            raise DependencyUnavailable(UNCONFIGURED_MSG)

    def _commit_after_delivery(self, message):
        """Stage the pending change, send ``message``, then commit.

        A failed send rolls the change back so nothing is persisted that the
        caller was told failed.
        """
        try:
            self.session.flush()
        except IntegrityError:
            self.session.rollback()
            raise ValidationError("Username already registered", reason="duplicate_username")

        try:
            self.notifier.send(message)
        except Exception:
            self.session.rollback()
            raise
        self.session.commit()
