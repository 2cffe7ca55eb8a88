"""
Huawei Cloud OBS command-line client.

Signs every request with the OBS HMAC-SHA1 scheme and uploads large
files as concurrent multipart uploads.
"""

__version__ = "0.3.0"

from obscli.cli import main

__all__ = ["main", "__version__"]
