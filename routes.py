from flask_restful import Api
from resources.auth import LoginResource, LogoutResource, SessionResource, ForgotPasswordResource, ResetPasswordResource
from resources.accounts import RegisterUserResource, UserListResource, AdminResetPasswordResource, UserStatusResource
from resources.incidents import (
    IncidentSubmitResource, IncidentListResource, IncidentDeleteResource,
    IncidentUpdateResource, IncidentExportResource
)


class PortalApi(Api):
    def handle_error(self, e):
        # app-level handlers shape every error body, so hand the error back to Flask
        raise e


def register_routes(app):
    api = PortalApi(app)
    api.add_resource(LoginResource, "/login")
    api.add_resource(LogoutResource, "/api/logout")
    api.add_resource(SessionResource, "/api/me")
    api.add_resource(ForgotPasswordResource, "/api/forgot-password")
    api.add_resource(ResetPasswordResource, "/api/reset-password")

    api.add_resource(RegisterUserResource, "/api/register-user")
    api.add_resource(UserListResource, "/api/get-users")
    api.add_resource(AdminResetPasswordResource, "/api/admin-reset-password")
    api.add_resource(UserStatusResource, "/api/update-user-status")

    api.add_resource(IncidentSubmitResource, "/api/incidents")
    api.add_resource(IncidentListResource, "/api/get-incidents")
    api.add_resource(IncidentDeleteResource, "/api/delete-incident/<string:incident_id>")
    api.add_resource(IncidentUpdateResource, "/api/update-incident/<string:incident_id>")
    api.add_resource(IncidentExportResource, "/api/export-incidents")
    return api
