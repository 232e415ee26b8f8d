# Overview: Request decorators for API routes.

from functools import wraps
from flask import current_app, g, jsonify, request

from .extensions import db
from .models import User
from .validation import ValidationError, parse_id


def require_principal(f):
    """
    Require an authenticated principal forwarded by the upstream gateway.

    Sets g.current_user to the User named by the PRINCIPAL_HEADER header.

    Returns 401 if:
    - the header is missing
    - no such user exists or the user is deactivated

    Returns 400 if the header is not a valid id.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        header = current_app.config["PRINCIPAL_HEADER"]
        raw_id = request.headers.get(header)

        if not raw_id:
            return jsonify({"error": "Authentication required"}), 401

        try:
            user_id = parse_id(raw_id, header)
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400

        user = db.session.get(User, user_id)
        if user is None or not user.is_active:
            return jsonify({"error": "Unknown principal"}), 401

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function
