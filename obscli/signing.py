"""Request signing for the OBS authentication scheme.

Every request carries ``Authorization: OBS {access_key}:{signature}``
where the signature is base64(HMAC-SHA1(secret_key, canonical_string))
and the canonical string is five newline-separated fields:

    METHOD
    CONTENT_MD5
    CONTENT_TYPE
    DATE
    CANONICAL_RESOURCE

Empty fields stay as empty lines, so the string always holds exactly
four newlines. Everything in this module is pure and deterministic.
"""

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Optional

from obscli.models import ContentType, Credentials


_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_http_date(moment: Optional[datetime] = None) -> str:
    """Format a timestamp as an RFC 1123 GMT date string.

    Day and month names are always English regardless of the process
    locale, which ``strftime`` does not guarantee.
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return "{}, {:02d} {} {:04d} {:02d}:{:02d}:{:02d} GMT".format(
        _WEEKDAYS[moment.weekday()],
        moment.day,
        _MONTHS[moment.month - 1],
        moment.year,
        moment.hour,
        moment.minute,
        moment.second,
    )


def content_md5(data: bytes) -> str:
    """Base64 of the raw MD5 digest, as used in the Content-MD5 header."""
    return base64.b64encode(hashlib.md5(data).digest()).decode("ascii")


def build_canonical_string(
    method: str,
    content_md5: str,
    content_type: Optional[ContentType],
    date: str,
    canonical_resource: str,
) -> str:
    """Assemble the string to sign. Field order is fixed."""
    return "\n".join([
        method.upper(),
        content_md5,
        content_type.value if content_type is not None else "",
        date,
        canonical_resource,
    ])


def sign(secret_key: str, canonical_string: str) -> str:
    """Compute base64(HMAC-SHA1(secret_key, canonical_string))."""
    mac = hmac.new(
        secret_key.encode("utf-8"),
        canonical_string.encode("utf-8"),
        hashlib.sha1,
    )
    return base64.b64encode(mac.digest()).decode("ascii")


def authorization_header(credentials: Credentials, signature: str) -> str:
    return f"OBS {credentials.access_key}:{signature}"
