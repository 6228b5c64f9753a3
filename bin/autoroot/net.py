import time
from contextlib import contextmanager
from typing import Dict, Generator, Optional

import requests  # type: ignore[import-untyped]

from . import constants as const

USER_AGENT = f"autoroot/{const.APP_VERSION}"
TRANSIENT_CLIENT_STATUSES = (408, 429)


def _is_permanent(e: requests.RequestException) -> bool:
    response = getattr(e, "response", None)
    if response is None:
        return False
    return 400 <= response.status_code < 500 and response.status_code not in TRANSIENT_CLIENT_STATUSES


@contextmanager
def request_with_retries(
    method: str,
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = const.HTTP_TIMEOUT,
    retries: int = const.HTTP_RETRIES,
    backoff: float = 5,
    stream: bool = True,
) -> Generator[requests.Response, None, None]:
    request_headers = {"User-Agent": USER_AGENT}
    if headers:
        request_headers.update(headers)

    for attempt in range(retries + 1):
        try:
            response = requests.request(
                method,
                url,
                headers=request_headers,
                timeout=timeout,
                stream=stream,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            if attempt >= retries or _is_permanent(e):
                raise
            time.sleep(backoff * (attempt + 1))
            continue

        with response:
            yield response
        return
