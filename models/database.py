import enum
import uuid
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy
from werkzeug.security import generate_password_hash, check_password_hash


db = SQLAlchemy()

NO_IMAGE = "No Image"


def _isoformat(value):
    return value.isoformat() + "Z" if value else None


class AccountStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

    @classmethod
    def parse(cls, value):
        """Return the member for ``value`` or None when it is not a known status."""
        try:
            return cls(value)
        except ValueError:
            return None


# Dealer and admin accounts
class Account(db.Model):
    __tablename__ = "users_data"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(16), nullable=False, default=AccountStatus.ACTIVE.value)
    reset_password_token = db.Column(db.String(64), nullable=True, index=True)
    reset_password_expires = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash or not password or not isinstance(password, str):
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE.value

    def issue_reset_token(self, token: str, expires: datetime):
        # token and expiry travel together
        self.reset_password_token = token
        self.reset_password_expires = expires

    def clear_reset_token(self):
        self.reset_password_token = None
        self.reset_password_expires = None

    def to_dict(self):
        return {
            "_id": str(self.id),
            "username": self.username,
            "email": self.email,
            "status": self.status,
            "createdAt": _isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<Account {self.username}>"


# Help-desk incident submitted from the help form
class Incident(db.Model):
    __tablename__ = "incidents"

    id = db.Column(db.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    dealer_code = db.Column(db.String(16), nullable=False, index=True)
    location = db.Column(db.String(255), default="")
    region = db.Column(db.String(32), default="")
    issue = db.Column(db.Text, nullable=False)
    email = db.Column(db.String(255), nullable=False)
    contact_no = db.Column(db.String(20), default="")
    screenshot = db.Column(db.Text, default=NO_IMAGE)
    reported_at = db.Column(db.DateTime, default=datetime.utcnow)
    checked = db.Column(db.Boolean, nullable=False, default=False)

    @property
    def has_screenshot(self) -> bool:
        return bool(self.screenshot) and self.screenshot != NO_IMAGE

    def to_dict(self):
        return {
            "_id": str(self.id),
            "dealerCode": self.dealer_code,
            "location": self.location,
            "region": self.region,
            "issue": self.issue,
            "email": self.email,
            "contactNo": self.contact_no,
            "screenshot": self.screenshot,
            "reportedAt": _isoformat(self.reported_at),
            "checked": self.checked,
        }

    def __repr__(self):
        return f"<Incident {self.id} dealer={self.dealer_code}>"


# JWT Model
class TokenBlocklist(db.Model):
    __tablename__ = "token_blocklist"

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(36), nullable=False, index=True)
    token_type = db.Column(db.String(10), nullable=False)  # access
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @classmethod
    def prune(cls, before):
        """Delete entries recorded before ``before``; their tokens have already expired."""
        return cls.query.filter(cls.created_at < before).delete(synchronize_session=False)


# Database initiator
def init_db(app):
    db.init_app(app)
    with app.app_context():
        db.create_all()
