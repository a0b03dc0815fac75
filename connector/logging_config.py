"""
Logging setup for the API.

Configures the root logger once with a console handler whose format
carries the request id assigned in ``before_request``, so every line
logged while serving a request can be correlated with the
``X-Request-ID`` response header.
"""
import logging

from flask import g, has_request_context


class RequestIdFilter(logging.Filter):
    """Attach the current request id (or ``-``) to every log record"""

    def filter(self, record):
        record.request_id = '-'
        if has_request_context():
            record.request_id = g.get('request_id', '-')
        return True


def setup_logging(level='INFO'):
    """
    Configure the root logger

    Args:
        level (str): Logging level name, case insensitive
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if any(getattr(h, '_connector_handler', False) for h in root.handlers):
        # Already configured (create_app called repeatedly, e.g. in tests)
        return

    handler = logging.StreamHandler()
    handler._connector_handler = True
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    ))
    root.addHandler(handler)
