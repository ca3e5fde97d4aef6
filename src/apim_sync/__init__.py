"""APIM Sync - Move API definitions between API management platforms."""

import logging
import warnings

__version__ = "0.1.1"
__author__ = "APIM Sync Team"
__license__ = "Apache-2.0"

# Suppress verbose third-party library logging
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpcore.connection").setLevel(logging.WARNING)
logging.getLogger("httpcore.http11").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

warnings.filterwarnings("ignore", category=DeprecationWarning, module="httpx")
