from rest_framework.parsers import JSONParser


class JSONPatchParser(JSONParser):
    """Accept ``application/json-patch+json`` bodies for PATCH requests."""

    media_type = "application/json-patch+json"
