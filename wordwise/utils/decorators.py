"""
Endpoint Decorators

Contains decorators shared by the HTTP controllers.
"""

from functools import wraps
from flask import jsonify


def require_service(getter, name, unavailable_message=None):
    """
    Decorator that resolves a global service before the endpoint runs.

    The service is passed to the endpoint as the keyword argument `name`.
    When the service was never initialized the request fails with 500.

    Args:
        getter: Zero-argument accessor such as get_game_service
        name: Keyword argument the endpoint receives the service under
        unavailable_message: Error text for the 500 response
    """
    message = unavailable_message or f"{name.replace('_', ' ').capitalize()} unavailable"

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            service = getter()
            if not service:
                return jsonify({
                    'success': False,
                    'error': message
                }), 500

            kwargs[name] = service
            return f(*args, **kwargs)

        return decorated_function

    return decorator
