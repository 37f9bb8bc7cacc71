"""Google Sheets backend for pricing config, partners and referred jobs"""
import json
import os
from typing import List, Optional, Dict, Any
from pathlib import Path

import gspread
import streamlit as st
from google.oauth2.service_account import Credentials

# Google Sheets configuration
SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
    'https://www.googleapis.com/auth/drive'
]

# Environment variable holding the ID from the pricing Google Sheet URL
SHEET_ID_ENV = 'PRICING_SHEET_ID'

SERVICES_HEADERS = ['name', 'label', 'type', 'standard_price', 'rate_per_mile',
                    'after_hours_eligible', 'active']
FEATURES_HEADERS = ['key', 'value']
TIME_MULTIPLIERS_HEADERS = ['name', 'badge', 'multiplier', 'start_time', 'end_time',
                            'days_of_week', 'active']
JOBS_HEADERS = ['id', 'partner_id', 'customer_name', 'service', 'status',
                'final_price', 'commission_rate', 'created_at', 'completed_at']
PARTNERS_HEADERS = ['id', 'company_name', 'email', 'commission_rate',
                    'total_commission_earned', 'total_paid', 'total_referrals',
                    'membership_tier', 'status', 'created_at']

SHEET_HEADERS = {
    'services': SERVICES_HEADERS,
    'features': FEATURES_HEADERS,
    'time_multipliers': TIME_MULTIPLIERS_HEADERS,
    'jobs': JOBS_HEADERS,
    'partners': PARTNERS_HEADERS,
}


def _to_cell(value: Any) -> Any:
    """Convert a Python value for writing to a sheet cell"""
    if isinstance(value, bool):
        return str(value).lower()
    if value is None:
        return ''
    return value if isinstance(value, (int, float, str)) else str(value)


class GoogleSheetsClient:
    """Client for interacting with the pricing spreadsheet"""

    def __init__(self, sheet_id: Optional[str] = None):
        self.sheet_id = sheet_id or os.environ.get(SHEET_ID_ENV, '')
        self.client = None
        self.spreadsheet = None
        self._connect()

    def _get_credentials(self) -> Optional[Credentials]:
        """Get Google credentials from various sources"""

        # Option 1: Streamlit secrets (for deployed app)
        try:
            if hasattr(st, 'secrets') and 'gcp_service_account' in st.secrets:
                creds_dict = dict(st.secrets['gcp_service_account'])
                return Credentials.from_service_account_info(creds_dict, scopes=SCOPES)
        except Exception:
            pass

        # Option 2: Environment variable with JSON content
        creds_json = os.environ.get('GOOGLE_CREDENTIALS_JSON')
        if creds_json:
            try:
                creds_dict = json.loads(creds_json)
                return Credentials.from_service_account_info(creds_dict, scopes=SCOPES)
            except (ValueError, KeyError) as e:
                print(f"⚠️ Invalid GOOGLE_CREDENTIALS_JSON: {e}")

        # Option 3: Local file in secrets folder
        secrets_path = Path(__file__).parent.parent / "secrets" / "google_credentials.json"
        if secrets_path.exists():
            return Credentials.from_service_account_file(str(secrets_path), scopes=SCOPES)

        # Option 4: File path from environment variable
        creds_file = os.environ.get('GOOGLE_CREDENTIALS_FILE')
        if creds_file and Path(creds_file).exists():
            return Credentials.from_service_account_file(creds_file, scopes=SCOPES)

        return None

    def _connect(self):
        """Connect to Google Sheets"""
        creds = self._get_credentials()
        if not creds:
            raise ValueError(
                "Google credentials not found. Please provide credentials via:\n"
                "1. Streamlit secrets (gcp_service_account)\n"
                "2. GOOGLE_CREDENTIALS_JSON environment variable\n"
                "3. secrets/google_credentials.json file\n"
                "4. GOOGLE_CREDENTIALS_FILE environment variable"
            )

        if not self.sheet_id:
            raise ValueError(f"{SHEET_ID_ENV} is not set")

        self.client = gspread.authorize(creds)
        self.spreadsheet = self.client.open_by_key(self.sheet_id)

    def get_worksheet(self, name: str):
        """Get or create a worksheet by name"""
        try:
            return self.spreadsheet.worksheet(name)
        except gspread.WorksheetNotFound:
            return self.spreadsheet.add_worksheet(title=name, rows=1000, cols=20)

    def _headers(self, worksheet, name: str) -> List[str]:
        headers = worksheet.row_values(1)
        if not headers:
            headers = list(SHEET_HEADERS[name])
            worksheet.update(range_name='A1', values=[headers])
        return headers

    # ============ PRICING CONFIG ============

    def get_services(self) -> List[Dict[str, Any]]:
        """Get service price rows. Raises on API failure so callers can fall back."""
        return self.get_worksheet('services').get_all_records()

    def get_features(self) -> Dict[str, Any]:
        """Get feature flags as a key -> value dict"""
        records = self.get_worksheet('features').get_all_records()
        return {str(r.get('key', '')).strip(): r.get('value') for r in records if r.get('key')}

    def get_time_periods(self) -> List[Dict[str, Any]]:
        """Get after-hours multiplier periods (empty when the sheet is new)"""
        return self.get_worksheet('time_multipliers').get_all_records()

    def set_feature(self, key: str, value: Any) -> None:
        """Create or update a single feature row"""
        worksheet = self.get_worksheet('features')
        self._headers(worksheet, 'features')
        cell = worksheet.find(key, in_column=1)
        if cell:
            worksheet.update(range_name=f'B{cell.row}', values=[[_to_cell(value)]])
        else:
            worksheet.append_row([key, _to_cell(value)], value_input_option='USER_ENTERED')

    # ============ RECORDS (jobs, partners) ============

    def get_records(self, name: str) -> List[Dict[str, Any]]:
        """Get all rows of a record sheet"""
        try:
            return self.get_worksheet(name).get_all_records()
        except Exception as e:
            print(f"Error getting {name}: {e}")
            return []

    def add_record(self, name: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Append a record to the sheet"""
        return self.add_records(name, [data])[0]

    def add_records(self, name: str, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Append multiple records at once"""
        worksheet = self.get_worksheet(name)
        headers = self._headers(worksheet, name)

        rows = [[_to_cell(data.get(header, '')) for header in headers] for data in records]
        if rows:
            worksheet.append_rows(rows, value_input_option='USER_ENTERED')

        return records

    def update_record(self, name: str, record_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update a record by ID (first column)"""
        worksheet = self.get_worksheet(name)

        try:
            cell = worksheet.find(record_id, in_column=1)
            if not cell:
                return None

            row_num = cell.row
            headers = worksheet.row_values(1)
            current_row = worksheet.row_values(row_num)

            # Build updated row
            updated_data = {}
            for i, header in enumerate(headers):
                updated_data[header] = current_row[i] if i < len(current_row) else ''
            updated_data.update(updates)

            new_row = [_to_cell(updated_data.get(header, '')) for header in headers]
            worksheet.update(range_name=f'A{row_num}', values=[new_row])

            return updated_data
        except Exception as e:
            print(f"Error updating {name} row {record_id}: {e}")
            return None

    def delete_record(self, name: str, record_id: str) -> bool:
        """Delete a record by ID"""
        worksheet = self.get_worksheet(name)

        try:
            cell = worksheet.find(record_id, in_column=1)
            if cell:
                worksheet.delete_rows(cell.row)
                return True
        except Exception as e:
            print(f"Error deleting {name} row {record_id}: {e}")

        return False


# Singleton instance - cached as Streamlit resource (survives reruns)
@st.cache_resource
def get_sheets_client() -> GoogleSheetsClient:
    """Get or create the Google Sheets client singleton (cached across reruns)."""
    return GoogleSheetsClient()
