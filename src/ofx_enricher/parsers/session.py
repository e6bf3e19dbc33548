"""
Session capture parser.

Extracts the cookie header, anti-forgery token and account number from a
cURL command copied out of the browser's developer tools.
"""

from pathlib import Path
from typing import Optional
import logging
import re

from ..models.transaction import SessionCredentials
from ..utils.exceptions import SessionError

logger = logging.getLogger(__name__)

COOKIE_HEADER = re.compile(r"Cookie: ([^'\"]*)", re.IGNORECASE)
COOKIE_TOKEN = re.compile(r"__RequestVerificationToken=([^;]*)")
BODY_TOKEN = re.compile(r'"__RequestVerificationToken"\s*:\s*"([^"]*)"')
ACCOUNT_NUMBER = re.compile(r'"AccountNumber"\s*:\s*"([^"]*)"')


class SessionParser:
    """Parser for copied cURL session captures."""

    def parse_file(self, file_path: Path) -> SessionCredentials:
        """
        Parse a cURL capture saved to a file.

        Raises:
            SessionError: If the file is unreadable or holds no cookie
        """
        logger.info(f"Reading session capture: {file_path}")
        try:
            text = file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise SessionError(f"Could not read session capture {file_path}: {e}") from e
        return self.parse(text)

    def parse(self, capture: str) -> SessionCredentials:
        """
        Parse a cURL capture.

        The token in the request body is preferred over the one carried in
        the cookie. Missing token or account number only produce warnings;
        later requests may still succeed without them.

        Args:
            capture: cURL command text

        Returns:
            Extracted session credentials

        Raises:
            SessionError: If the capture is empty or has no Cookie header
        """
        if not capture or not capture.strip():
            raise SessionError("Session capture is empty")

        cookie = _first_group(COOKIE_HEADER, capture)
        if not cookie:
            raise SessionError("Could not extract Cookie from curl command")

        csrf_token = _first_group(BODY_TOKEN, capture) or _first_group(COOKIE_TOKEN, cookie)
        if not csrf_token:
            logger.warning("Could not extract __RequestVerificationToken")

        account_number = _first_group(ACCOUNT_NUMBER, capture)
        if not account_number:
            logger.warning("Could not extract AccountNumber from curl command")

        logger.debug(
            f"Session parsed: cookie={cookie[:20]}..., token present={bool(csrf_token)}, "
            f"account={account_number or '-'}"
        )
        return SessionCredentials(
            cookie=cookie,
            csrf_token=csrf_token or "",
            account_number=account_number or "",
        )


def _first_group(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(1) if match else None
