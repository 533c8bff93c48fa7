"""
HTTP methods accepted by the application routes.

Every handler answers regardless of the request method.
"""

ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
