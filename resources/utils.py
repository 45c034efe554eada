# resources/utils.py
from functools import wraps

from flask import current_app, g, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from models.database import db
from services.accounts import AccountService
from services.errors import AuthenticationError, AuthorizationError, ValidationError
from services.incidents import IncidentService


def json_body():
    """Return the JSON request body, which must be an object when present."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def account_service():
    return AccountService(
        db.session,
        current_app.extensions["notifier"],
        current_app.config,
        clock=current_app.extensions["clock"],
    )


def incident_service():
    return IncidentService(db.session, current_app.config, clock=current_app.extensions["clock"])


def authenticate_account():
    """
    Verify the bearer token and load the account it was issued to.
    Raises AuthenticationError if the account is gone or deactivated.
    """
    verify_jwt_in_request()
    identity = get_jwt_identity()
    if not identity:
        raise AuthenticationError("Invalid token identity", reason="invalid_token")

    account = account_service().get_account(identity)
    if not account:
        raise AuthenticationError("Account not found", reason="invalid_token")
    if not account.is_active:
        raise AuthenticationError("Username is inactive.", reason="inactive_account")

    g.account = account
    return account


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        authenticate_account()
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        account = authenticate_account()
        if account.username != current_app.config["ADMIN_USERNAME"]:
            current_app.logger.warning("Admin route refused for %s", account.username)
            raise AuthorizationError("Admin access required")
        return fn(*args, **kwargs)
    return wrapper
