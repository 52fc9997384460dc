"""
Requests session used as HTTP transport and session cookie store.
Optionally retries transient errors (429, 500, 502, 503, 504) with backoff.
"""

import logging
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from nami_api import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"nami-api/{__version__}"


def create_session(retries: int = 0) -> requests.Session:
    """Create a requests session for talking to NaMi.

    The session's cookie jar holds the NaMi session cookie, so one session
    must be reused for every request of a client.

    Args:
        retries: Transport-level retries on 429/5xx with exponential
            backoff (1s, 2s, 4s, ...). 0 disables them.
    """
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})

    if retries:
        retry = Retry(
            total=retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "PUT", "POST", "DELETE"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

    logger.debug(f"HTTP session created (retries={retries})")
    return session
