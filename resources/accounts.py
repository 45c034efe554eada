# resources/accounts.py
from flask_restful import Resource
from .utils import account_service, admin_required, json_body


class RegisterUserResource(Resource):
    method_decorators = [admin_required]

    def post(self):
        data = json_body()
        account_service().register_account(data.get("username"), data.get("email"), data.get("status"))
        return {"message": "User registered successfully, login credentials have been emailed."}, 201


class UserListResource(Resource):
    method_decorators = [admin_required]

    def get(self):
        return [account.to_dict() for account in account_service().list_accounts()], 200


class AdminResetPasswordResource(Resource):
    method_decorators = [admin_required]

    def post(self):
        data = json_body()
        account_service().admin_reset_password(data.get("username"))
        return {"message": "Password reset successfully. New password sent to the user."}, 200


class UserStatusResource(Resource):
    method_decorators = [admin_required]

    def put(self):
        data = json_body()
        account_service().set_account_status(data.get("username"), data.get("status"))
        return {"message": "Status updated successfully"}, 200
