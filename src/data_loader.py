"""Data loading utilities for partner referral jobs"""
import pandas as pd
from datetime import datetime
from typing import List, Optional

from .models import Job
from .money import to_decimal
from config import DEFAULT_COMMISSION_RATE, JOB_STATUSES


class DataLoader:
    """
    Load referral job data from spreadsheet exports.
    """

    @staticmethod
    def load_from_excel(filepath: str, commission_rate: Optional[float] = None,
                        partner_id: Optional[str] = None) -> List[Job]:
        """
        Load jobs from an Excel file.

        Expected columns:
        - Date (optional)
        - Customer (optional)
        - Service (optional)
        - Final Price (optional, blank for unfinished jobs)
        - Commission % (optional, uses default if not provided)
        - Status (optional, default completed when a final price is present)

        Args:
            filepath: Path to Excel file
            commission_rate: Override commission rate (percent) for all jobs
            partner_id: Partner the jobs were referred by

        Returns:
            List of Job objects
        """
        return DataLoader.load_from_dataframe(pd.read_excel(filepath), commission_rate, partner_id)

    @staticmethod
    def load_from_csv(filepath: str, commission_rate: Optional[float] = None,
                      partner_id: Optional[str] = None) -> List[Job]:
        """
        Load jobs from a CSV file.
        Uses the same column rules as Excel loading.
        """
        return DataLoader.load_from_dataframe(pd.read_csv(filepath), commission_rate, partner_id)

    @staticmethod
    def load_from_dataframe(df: pd.DataFrame, commission_rate: Optional[float] = None,
                            partner_id: Optional[str] = None) -> List[Job]:
        # Normalize column names
        df = df.copy()
        df.columns = df.columns.str.strip().str.lower()

        jobs = []
        for index, row in df.iterrows():
            created_at = DataLoader._parse_date(row.get('date'))

            price_val = row.get('final price', row.get('price', row.get('total')))
            final_price = to_decimal(price_val) if pd.notna(price_val) else None

            # Commission rate (percent)
            rate = commission_rate
            if rate is None:
                rate_col = row.get('commission %', row.get('%', row.get('commission', None)))
                if rate_col is not None and pd.notna(rate_col):
                    if isinstance(rate_col, str):
                        rate = float(rate_col.replace('%', '').strip())
                    else:
                        rate = float(rate_col)
                        if rate <= 1:
                            rate = rate * 100
                else:
                    rate = DEFAULT_COMMISSION_RATE

            status = str(row.get('status', '') if pd.notna(row.get('status', None)) else '')
            status = status.strip().lower().replace(' ', '_')
            if status not in JOB_STATUSES:
                status = 'completed' if final_price is not None else 'pending'

            jobs.append(Job(
                id=str(row.get('id', index + 1)),
                commission_rate=rate,
                status=status,
                final_price=final_price,
                partner_id=partner_id,
                created_at=created_at,
                service=str(row.get('service', '') if pd.notna(row.get('service', None)) else ''),
                customer_name=str(row.get('customer', '') if pd.notna(row.get('customer', None)) else ''),
            ))

        return jobs

    @staticmethod
    def _parse_date(date_val) -> Optional[datetime]:
        if date_val is None or not pd.notna(date_val):
            return None
        if isinstance(date_val, str):
            # Try to parse various date formats
            for fmt in ['%Y-%m-%d', '%Y%m%d', '%m/%d/%Y', '%Y-%m-%dT%H:%M:%S']:
                try:
                    return datetime.strptime(date_val.strip(), fmt)
                except ValueError:
                    continue
            return None
        if isinstance(date_val, datetime):
            return date_val.to_pydatetime() if hasattr(date_val, 'to_pydatetime') else date_val
        return None
