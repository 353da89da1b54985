from rest_framework.response import Response


def envelope(status_code, data=None, message=None, error=None, headers=None):
    """
    Build the ``{statusCode, message?, data?, error?}`` body shared by every
    API endpoint. Keys whose value is None are left out, and the HTTP status
    always mirrors ``statusCode``.
    """
    body = {"statusCode": status_code}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error
    return Response(body, status=status_code, headers=headers)
