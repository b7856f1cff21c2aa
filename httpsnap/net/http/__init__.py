from httpsnap.net.http import headers
from httpsnap.net.http import status_codes

__all__ = [
    "headers",
    "status_codes",
]
