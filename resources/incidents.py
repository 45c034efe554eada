# resources/incidents.py
from flask_restful import Resource, reqparse, inputs
from flask import Response
from .utils import admin_required, incident_service, json_body


XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class IncidentSubmitResource(Resource):
    def post(self):
        data = json_body()
        incident = incident_service().submit_incident(data)
        return {"message": "Incident reported successfully.", "incidentId": str(incident.id)}, 201


class IncidentListResource(Resource):
    method_decorators = [admin_required]

    def get(self):
        parser = reqparse.RequestParser()
        parser.add_argument("region", type=str, location="args")
        parser.add_argument("checked", type=inputs.boolean, location="args")
        args = parser.parse_args()

        incidents = incident_service().list_incidents(region=args["region"], checked=args["checked"])
        return [inc.to_dict() for inc in incidents], 200


class IncidentDeleteResource(Resource):
    method_decorators = [admin_required]

    def delete(self, incident_id):
        incident_service().delete_incident(incident_id)
        return {"message": "Incident deleted successfully"}, 200


class IncidentUpdateResource(Resource):
    method_decorators = [admin_required]

    def put(self, incident_id):
        data = json_body()
        incident_service().set_incident_checked(incident_id, data.get("checked"))
        return {"message": "Incident status updated successfully"}, 200


class IncidentExportResource(Resource):
    method_decorators = [admin_required]

    def get(self):
        return Response(
            incident_service().export_incidents(),
            mimetype=XLSX_MIMETYPE,
            headers={"Content-Disposition": "attachment;filename=incident_reports.xlsx"}
        )
