"""
Roster lookup against the school's Google Sheet.

The sheet is expected to hold First Name in column A, Last Name in column B and
the roster id in column M. Lookups match the trimmed, case-insensitive full name.
"""

import logging
import random
import re
import threading

from django.conf import settings
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account
import requests

from .service_result import ServiceResult

logger = logging.getLogger(__name__)

SCOPES = ['https://www.googleapis.com/auth/spreadsheets.readonly']
VALUES_URL = 'https://sheets.googleapis.com/v4/spreadsheets/{sheet_id}/values/{range}'
SHEET_URL_RE = re.compile(r'/spreadsheets/d/([a-zA-Z0-9_-]+)')
ID_COLUMN = 12  # Column M


def synthesize_roster_id(prefix=None):
    """Random stand-in roster id such as GS-48265."""
    if prefix is None:
        prefix = getattr(settings, 'ROSTER_ID_PREFIX', 'GS-')
    return f"{prefix}{random.randint(10000, 99999)}"


def sheet_id_from_url(url):
    if not url:
        return ''
    match = SHEET_URL_RE.search(url)
    if match:
        return match.group(1)
    # A bare id pasted instead of a URL
    return url.strip() if '/' not in url else ''


def configured_sheet_id():
    """Sheet id from settings, else from the googleSheetUrl setting saved by an admin."""
    sheet_id = getattr(settings, 'ROSTER_SHEET_ID', '')
    if sheet_id:
        return sheet_id
    from system.models import Setting
    return sheet_id_from_url(Setting.get_value('googleSheetUrl'))


def _service_account_credentials():
    email = getattr(settings, 'ROSTER_SERVICE_ACCOUNT_EMAIL', '')
    # Private keys often arrive with escaped newlines
    private_key = getattr(settings, 'ROSTER_PRIVATE_KEY', '').replace('\\n', '\n')
    if not email or not private_key:
        return None
    info = {
        'type': 'service_account',
        'client_email': email,
        'private_key': private_key,
        'token_uri': 'https://oauth2.googleapis.com/token',
    }
    return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)


class SheetsRosterLookup:
    """Looks up roster ids by name. Sheet rows are fetched once per instance."""

    def __init__(self, sheet_id=None, sheet_name=None, session=None, timeout=None):
        self.sheet_id = sheet_id if sheet_id is not None else configured_sheet_id()
        self.sheet_name = sheet_name or getattr(settings, 'ROSTER_SHEET_NAME', 'Sheet1')
        self.timeout = timeout or getattr(settings, 'ROSTER_TIMEOUT', 20)
        self._session = session
        self._rows = None
        self._rows_lock = threading.Lock()
        self._fetch_error = None

    @property
    def configured(self):
        return bool(self.sheet_id)

    def _get_session(self):
        if self._session is None:
            credentials = _service_account_credentials()
            if credentials is None:
                raise GoogleAuthError('Google service account credentials are not set.')
            self._session = AuthorizedSession(credentials)
        return self._session

    def _fetch_rows(self):
        # Lookups of one import share a single fetch
        with self._rows_lock:
            if self._fetch_error is not None:
                raise self._fetch_error
            if self._rows is None:
                url = VALUES_URL.format(sheet_id=self.sheet_id, range=f"{self.sheet_name}!A:M")
                try:
                    response = self._get_session().get(url, timeout=self.timeout)
                    response.raise_for_status()
                    self._rows = response.json().get('values', [])
                except (requests.RequestException, GoogleAuthError, ValueError) as e:
                    self._fetch_error = e
                    raise
            return self._rows

    def lookup(self, first_name, last_name):
        """Return the roster id for a name, a clean miss, or a degraded result on error"""
        if not self.configured:
            logger.warning("Roster sheet is not configured. Skipping roster lookup.")
            return ServiceResult.missing()

        search_name = f"{first_name.strip()} {last_name.strip()}".lower()
        try:
            rows = self._fetch_rows()
        except (requests.RequestException, GoogleAuthError, ValueError) as e:
            logger.warning(f"Roster lookup failed for {search_name}: {e}")
            return ServiceResult.degraded(None, f"Failed to communicate with Google Sheets: {e}")

        for row in rows:
            row_first = row[0] if len(row) > 0 else ''
            row_last = row[1] if len(row) > 1 else ''
            if f"{row_first.strip()} {row_last.strip()}".lower() == search_name:
                roster_id = row[ID_COLUMN].strip() if len(row) > ID_COLUMN else ''
                return ServiceResult.ok(roster_id) if roster_id else ServiceResult.missing()

        return ServiceResult.missing()
