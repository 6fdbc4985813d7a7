from flask import jsonify


def success_response(data=None, message="OK", status_code=200):
    payload = {"success": True, "message": message}
    if data is not None:
        payload["data"] = data
    response = jsonify(payload)
    response.status_code = status_code
    return response


def created_response(data=None, message="Created"):
    return success_response(data=data, message=message, status_code=201)
