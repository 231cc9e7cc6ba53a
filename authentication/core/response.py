def standardized_response(success=True, data=None, message=None, error=None, error_code=None):
    """Build the JSON envelope shared by every API view."""
    response = {"success": success}

    if message:
        response["message"] = message
    if data is not None:
        response["data"] = data
    if error is not None:
        response["error"] = error
    if error_code is not None:
        response["error_code"] = error_code

    return response
