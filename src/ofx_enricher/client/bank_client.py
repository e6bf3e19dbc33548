"""
HTTP client for the bank's internet banking endpoints.

Replays the requests the web application makes, authenticated with a
cookie and anti-forgery token captured from a logged-in browser session.
"""

from typing import Any, Optional
import json
import logging
import urllib.error
import urllib.parse
import urllib.request

from ..config import BankConfig
from ..models.transaction import ReportingPeriod, SessionCredentials
from ..utils.exceptions import BankRequestError, SessionError

logger = logging.getLogger(__name__)


class BankClient:
    """Client for the transaction listing, payment and OFX export endpoints."""

    def __init__(self, config: BankConfig, session: SessionCredentials):
        """
        Initialize the client.

        Args:
            config: Endpoint configuration
            session: Captured session credentials

        Raises:
            SessionError: If the session has no cookie
        """
        if not session.cookie:
            raise SessionError("No session cookie; log in and capture the request again")
        self.config = config
        self.session = session

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}?u={urllib.parse.quote(path, safe='')}"

    def _headers(self, accept: str, content_type: str) -> dict[str, str]:
        origin = urllib.parse.urlsplit(self.config.base_url)
        return {
            "User-Agent": self.config.user_agent,
            "Accept": accept,
            "Content-Type": content_type,
            "X-Requested-With": "XMLHttpRequest",
            "Origin": f"{origin.scheme}://{origin.netloc}",
            "Cookie": self.session.cookie,
        }

    def _post(self, path: str, body: bytes, headers: dict[str, str]) -> str:
        """POST ``body`` and return the response text."""
        req = urllib.request.Request(self._url(path), data=body, headers=headers, method="POST")
        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout_seconds) as resp:
                charset = resp.headers.get_content_charset() or "utf-8"
                return resp.read().decode(charset, errors="replace")
        except urllib.error.HTTPError as e:
            raise BankRequestError(f"{path} returned HTTP {e.code}: {e.reason}") from e
        except urllib.error.URLError as e:
            raise BankRequestError(f"{path} request failed: {e.reason}") from e

    def _post_json(self, path: str, payload: dict[str, Any]) -> str:
        return self._post(
            path,
            json.dumps(payload).encode("utf-8"),
            self._headers("application/json; charset=utf-8", "application/json; charset=utf-8"),
        )

    def fetch_listing(self, period: ReportingPeriod) -> str:
        """Fetch the raw transaction history for the period."""
        logger.info(f"Fetching transactions for {period.year}-{period.month:02d}...")
        payload = {
            "__RequestVerificationToken": self.session.csrf_token,
            "rdoTransctionType": "46",
            "Description": "",
            "TransactionTypeId": "40",
            "TransactionPeriod": "Selected date range",
            "BeginDate": period.begin_timestamp,
            "EndDate": period.end_timestamp,
            "MinimumOrExactAmount": "",
            "MaximumAmount": "",
            "MinimumOrExactChequeNumber": "",
            "TransactionOrder": "0",
            "DateFormat": "dd/MM/yyyy",
            "NewestTransactionFirst": True,
            "TransactionTypeDesc": "ALL",
            "AccountNumber": self.session.account_number,
            "ExcludeManualTransactions": False,
            "MinimumAmount": "",
            "isSearchFiltered": False,
        }
        return self._post_json(self.config.listing_path, payload)

    def fetch_payment(self, payment_id: str) -> str:
        """Fetch the raw NPP payment details for one payment id."""
        return self._post_json(self.config.payment_path, {"PaymentId": payment_id})

    def fetch_ofx(self, period: ReportingPeriod) -> str:
        """Fetch the raw OFX export body for the period."""
        logger.info("Fetching OFX export...")
        form = {
            "__RequestVerificationToken": self.session.csrf_token,
            "rdoTransctionType": "46",
            "TransactionTypeId": "40",
            "TransactionPeriod": "Selected date range",
            "BeginDate": period.begin_timestamp,
            "EndDate": period.end_timestamp,
            "TransactionOrder": "0",
            "DateFormat": "dd/MM/yyyy",
            "NewestTransactionFirst": "true",
            "TransactionTypeDesc": "ALL",
            "AccountNumber": self.session.account_number,
        }
        headers = self._headers(
            "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "application/x-www-form-urlencoded",
        )
        del headers["X-Requested-With"]
        return self._post(
            self.config.export_path,
            urllib.parse.urlencode(form).encode("utf-8"),
            headers,
        )


def describe_session(session: Optional[SessionCredentials]) -> str:
    """Short, non-secret description of a session for debug output."""
    if session is None:
        return "no session"
    return (
        f"cookie {len(session.cookie)} chars, "
        f"token {'present' if session.csrf_token else 'missing'}, "
        f"account {session.account_number or 'missing'}"
    )
