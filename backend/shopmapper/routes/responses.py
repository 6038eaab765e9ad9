# Overview: Shared request parsing and error-to-response mapping for route modules.

from flask import jsonify, request

from ..validation import ConflictError, NotFoundError, ValidationError


def submitted_fields():
    """
    Submitted fields of a mutation.

    Form-encoded (or multipart) bodies are the primary contract; a JSON
    object body is accepted with the same field names.
    """
    if request.form:
        return request.form
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def error_response(exc: Exception):
    """Map service-layer exceptions to JSON error responses."""
    if isinstance(exc, ValidationError):
        return jsonify({"error": str(exc)}), 400
    if isinstance(exc, NotFoundError):
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, ConflictError):
        return jsonify({"error": str(exc)}), 409
    raise exc
