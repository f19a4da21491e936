"""Relight: interactive regular expression tester with live group highlighting."""

import logging

__version__ = "0.3.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
