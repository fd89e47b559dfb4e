# apps/core/api_exceptions.py
from rest_framework.exceptions import APIException


class VisitorRequired(APIException):
    status_code = 400
    default_detail = "Visitor identity is missing. Send the X-Visitor-Id header."
    default_code = "visitor_required"
