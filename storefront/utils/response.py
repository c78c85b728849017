from flask import jsonify

def success_response(data=None, message="Success", code=200, status="success"):
    response = {
        "status": status,
        "message": message,
        "data": data
    }
    return jsonify(response), code

def error_response(message="An error occurred", code=400, data=None):
    return jsonify({
        "status": "error",
        "message": message,
        "data": data
    }), code

def storefront_error_response(error, code=400):
    data = dict(error.details) if error.details else None
    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        data = dict(data or {}, upstream_status=status_code)
    return error_response(error.message, code=code, data=data)
