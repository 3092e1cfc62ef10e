"""ServiceNow Change Management API client."""

import json
import logging
from typing import Optional

import requests

from snow_change.errors import APICallError

logger = logging.getLogger("snow_change.client")

SIGNATURE_HEADER = 'x-sn-hmac-signature-256'


class ChangeClient:
    """Client for the ServiceNow change request REST endpoint."""

    def __init__(
        self,
        api_url: str,
        token: str,
        timeout: int = 60,
    ):
        """
        Initialize the change client.

        Args:
            api_url: Change collection URL, e.g.
                https://dev1.service-now.com/api/sn_chg_rest/change
            token: Pre-computed HMAC signature, sent verbatim.
            timeout: Request timeout in seconds.
        """
        self.api_url = api_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            'Accept': 'application/json',
            'Content-Type': 'application/json',
            'User-Agent': 'snow-change/1.0',
            SIGNATURE_HEADER: token,
        })

    def call(self, method: str, url: str, body: Optional[str] = None) -> str:
        """
        Issue a single request and return the raw response body.

        HTTP status codes are not interpreted; only a request that could not
        be completed is treated as a failure.

        Args:
            method: HTTP method.
            url: Absolute request URL.
            body: Raw JSON payload, or None to send no body.

        Returns:
            Response body text.

        Raises:
            APICallError: If the request could not be completed.
        """
        logger.debug(
            f"{method} {url}",
            extra={'context': {'has_body': body is not None}}
        )

        try:
            response = self._session.request(
                method,
                url,
                data=body.encode('utf-8') if body is not None else None,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise APICallError(f"API call failed: {method} {url}: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.warning(
                f"API returned status {response.status_code}",
                extra={'context': {'method': method, 'url': url}}
            )

        logger.debug(
            f"Response {response.status_code}: {response.text[:500]}"
        )

        return response.text

    def create_change(self, body: str) -> str:
        """POST a new change request to the collection."""
        return self.call('POST', self.api_url, body)

    def get_change(self, cr_id: str) -> str:
        """GET a single change request."""
        return self.call('GET', f"{self.api_url}/{cr_id}")

    def update_change(self, cr_id: str, payload: dict) -> str:
        """PATCH fields of a single change request."""
        return self.call('PATCH', f"{self.api_url}/{cr_id}", json.dumps(payload))

    def close(self):
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
