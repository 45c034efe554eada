# resources/auth.py
from flask_restful import Resource
from flask import current_app, g
from flask_jwt_extended import get_jwt
from models.database import db, TokenBlocklist
from .utils import account_service, json_body, login_required


class LoginResource(Resource):
    def post(self):
        data = json_body()
        token = account_service().authenticate(data.get("username"), data.get("password"))
        return {"success": True, "token": token, "message": "Login successful"}, 200


class LogoutResource(Resource):
    method_decorators = [login_required]

    def post(self):
        jti = get_jwt()["jti"]
        now = current_app.extensions["clock"]()
        # rows older than a token's lifetime can no longer match a live token
        TokenBlocklist.prune(now - current_app.config["JWT_ACCESS_TOKEN_EXPIRES"])
        db.session.add(TokenBlocklist(jti=jti, token_type="access", created_at=now))
        db.session.commit()
        current_app.logger.info("Session token revoked for %s", g.account.username)
        return {"success": True, "message": "Logged out successfully"}, 200


class SessionResource(Resource):
    method_decorators = [login_required]

    def get(self):
        account = g.account
        role = "admin" if account_service().is_admin(account.username) else "dealer"
        return {**account.to_dict(), "role": role}, 200


class ForgotPasswordResource(Resource):
    def post(self):
        data = json_body()
        masked = account_service().request_password_reset(data.get("username"))
        return {"message": "Password reset email sent successfully", "maskedEmail": masked}, 200


class ResetPasswordResource(Resource):
    def post(self):
        data = json_body()
        account_service().consume_password_reset(data.get("token"), data.get("newPassword"))
        return {"message": "Password has been reset successfully"}, 200
