"""Referral storage for partners and jobs - Google Sheets Backend"""
import json
import uuid
import os
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Dict, Any
from dataclasses import dataclass, asdict, fields

from config import DEFAULT_COMMISSION_RATE, JOB_STATUSES
from .calculator import CommissionCalculator
from .models import Job, Partner, PartnerEarnings
from .money import round_cents, to_decimal


def _to_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    amount = to_decimal(value)
    return default if amount is None else float(amount)


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


@dataclass
class StoredJob:
    """Represents a stored referral job with all metadata"""
    id: str
    partner_id: str
    customer_name: str
    service: str
    status: str = 'pending'  # see JOB_STATUSES
    final_price: Optional[float] = None
    commission_rate: Optional[float] = None  # percent, snapshotted at referral
    created_at: str = ""  # ISO format datetime
    completed_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoredJob':
        data = {k: v for k, v in data.items() if k in {f.name for f in fields(cls)}}
        # Sheets return '' for empty cells
        data['final_price'] = _to_float(data.get('final_price'), default=None)
        data['commission_rate'] = _to_float(data.get('commission_rate'), default=None)
        data.setdefault('customer_name', '')
        data.setdefault('service', '')
        data['partner_id'] = str(data.get('partner_id') or '')
        if data.get('status') not in JOB_STATUSES:
            data['status'] = 'pending'
        if not data.get('completed_at'):
            data['completed_at'] = None
        data['created_at'] = str(data.get('created_at') or '')
        return cls(**data)

    def to_job(self) -> Job:
        return Job(
            id=self.id,
            commission_rate=self.commission_rate if self.commission_rate is not None else 0,
            status=self.status,
            final_price=to_decimal(self.final_price),
            partner_id=self.partner_id or None,
            created_at=_parse_datetime(self.created_at),
            service=self.service,
            customer_name=self.customer_name,
            completed_at=_parse_datetime(self.completed_at),
        )


@dataclass
class StoredPartner:
    """Represents a stored partner account"""
    id: str
    company_name: str
    email: str = ""
    commission_rate: float = DEFAULT_COMMISSION_RATE
    total_commission_earned: float = 0.0
    total_paid: float = 0.0
    total_referrals: int = 0
    membership_tier: str = 'silver'
    status: str = 'active'
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoredPartner':
        data = {k: v for k, v in data.items() if k in {f.name for f in fields(cls)}}
        data['commission_rate'] = _to_float(data.get('commission_rate'), DEFAULT_COMMISSION_RATE)
        if not 0 <= data['commission_rate'] <= 100:
            print(f"⚠️ Partner {data.get('id')} has invalid commission rate "
                  f"{data['commission_rate']}, using {DEFAULT_COMMISSION_RATE}%")
            data['commission_rate'] = DEFAULT_COMMISSION_RATE
        data['total_commission_earned'] = _to_float(data.get('total_commission_earned'))
        data['total_paid'] = _to_float(data.get('total_paid'))
        data['total_referrals'] = int(_to_float(data.get('total_referrals')))
        data.setdefault('email', '')
        data.setdefault('membership_tier', 'silver')
        data.setdefault('status', 'active')
        data['created_at'] = str(data.get('created_at') or '')
        return cls(**data)

    def to_partner(self) -> Partner:
        return Partner(
            id=self.id,
            company_name=self.company_name,
            commission_rate=self.commission_rate,
            total_commission_earned=to_decimal(self.total_commission_earned),
            total_paid=to_decimal(self.total_paid),
            total_referrals=self.total_referrals,
            membership_tier=self.membership_tier,
            status=self.status,
            email=self.email,
        )


def use_google_sheets() -> bool:
    """Determine if we should use Google Sheets or local storage"""
    # Check for environment variable to force local storage
    if os.environ.get('USE_LOCAL_STORAGE', '').lower() == 'true':
        return False

    # Check if we have Google credentials available
    try:
        # Check Streamlit secrets
        import streamlit as st
        if hasattr(st, 'secrets') and 'gcp_service_account' in st.secrets:
            return True
    except Exception:
        pass

    # Check environment variable
    if os.environ.get('GOOGLE_CREDENTIALS_JSON'):
        return True

    # Check local secrets file
    secrets_path = Path(__file__).parent.parent / "secrets" / "google_credentials.json"
    if secrets_path.exists():
        return True

    return False


class JobStorage:
    """Manages persistent storage of partners and referred jobs

    Automatically uses Google Sheets when credentials are available,
    falls back to local JSON files for development.
    """

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)
        self.jobs_file = self.data_dir / "referral_jobs.json"
        self.partners_file = self.data_dir / "partners.json"
        self.calculator = CommissionCalculator()

        self._use_sheets = use_google_sheets()
        self._sheets_client = None

        if self._use_sheets:
            try:
                from .sheets_storage import get_sheets_client
                self._sheets_client = get_sheets_client()
                print("✅ Using Google Sheets storage")
            except Exception as e:
                print(f"⚠️ Failed to connect to Google Sheets: {e}")
                print("📁 Falling back to local storage")
                self._use_sheets = False

        # Ensure local data directory exists (for fallback)
        if not self._use_sheets:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            if not self.jobs_file.exists():
                self._save_jobs_local([])
            if not self.partners_file.exists():
                self._save_partners_local([])

    # ============ JOBS ============

    def get_all_jobs(self) -> List[StoredJob]:
        """Get all stored jobs"""
        if self._use_sheets:
            records = self._sheets_client.get_records('jobs')
            return [StoredJob.from_dict(job) for job in records if job.get('id')]
        return self._get_all_jobs_local()

    def _get_all_jobs_local(self) -> List[StoredJob]:
        """Get all jobs from local file"""
        try:
            with open(self.jobs_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
                return [StoredJob.from_dict(job) for job in data]
        except (json.JSONDecodeError, FileNotFoundError):
            return []

    def get_jobs_by_partner(self, partner_id: str) -> List[StoredJob]:
        """Get all jobs referred by a partner, newest first"""
        jobs = [job for job in self.get_all_jobs() if job.partner_id == partner_id]
        return sorted(jobs, key=lambda j: j.created_at, reverse=True)

    def get_job_by_id(self, job_id: str) -> Optional[StoredJob]:
        """Get a specific job by ID"""
        for job in self.get_all_jobs():
            if job.id == job_id:
                return job
        return None

    def add_job(self, job: StoredJob) -> StoredJob:
        """Add a new referral job"""
        return self.add_jobs([job])[0]

    def add_jobs(self, new_jobs: List[StoredJob]) -> List[StoredJob]:
        """
        Add multiple jobs at once.

        Jobs without a commission rate get the referring partner's current
        rate; that snapshot is what their commission is computed from.
        """
        referrals: Dict[str, int] = {}
        for job in new_jobs:
            if not job.id:
                job.id = str(uuid.uuid4())
            if not job.created_at:
                job.created_at = datetime.now().isoformat()
            if job.partner_id:
                referrals[job.partner_id] = referrals.get(job.partner_id, 0) + 1
                if job.commission_rate is None:
                    partner = self.get_partner_by_id(job.partner_id)
                    job.commission_rate = partner.commission_rate if partner else DEFAULT_COMMISSION_RATE

        if self._use_sheets:
            try:
                self._sheets_client.add_records('jobs', [job.to_dict() for job in new_jobs])
            except Exception as e:
                print(f"Error adding jobs to sheets: {e}")
                raise
        else:
            jobs = self._get_all_jobs_local()
            jobs.extend(new_jobs)
            self._save_jobs_local(jobs)

        for partner_id, count in referrals.items():
            partner = self.get_partner_by_id(partner_id)
            if partner:
                self.update_partner(partner_id, {'total_referrals': partner.total_referrals + count})

        return new_jobs

    def update_job(self, job_id: str, updates: Dict[str, Any]) -> Optional[StoredJob]:
        """Update a job by ID"""
        if self._use_sheets:
            result = self._sheets_client.update_record('jobs', job_id, updates)
            return StoredJob.from_dict(result) if result else None

        jobs = self._get_all_jobs_local()
        for i, job in enumerate(jobs):
            if job.id == job_id:
                job_dict = job.to_dict()
                job_dict.update(updates)
                jobs[i] = StoredJob.from_dict(job_dict)
                self._save_jobs_local(jobs)
                return jobs[i]
        return None

    def update_job_status(self, job_id: str, status: str) -> Optional[StoredJob]:
        """Move a job to a non-completed status (use complete_job to complete)"""
        if status not in JOB_STATUSES or status == 'completed':
            raise ValueError(f"Invalid status: {status}")
        return self.update_job(job_id, {'status': status})

    def complete_job(self, job_id: str, final_price: float) -> Optional[StoredJob]:
        """
        Complete a job and credit the referring partner.

        The commission uses the job's snapshotted rate. A job that is
        already completed is returned unchanged so it is never credited twice.
        """
        job = self.get_job_by_id(job_id)
        if job is None:
            return None
        if job.status == 'completed':
            print(f"⚠️ Job {job_id} already completed")
            return job

        amount = to_decimal(final_price)
        if amount is None or amount < 0:
            raise ValueError(f"Invalid final price: {final_price!r}")

        updated = self.update_job(job_id, {
            'status': 'completed',
            'final_price': float(amount),
            'completed_at': datetime.now().isoformat(),
        })
        if updated is None:
            return None

        if updated.partner_id:
            partner = self.get_partner_by_id(updated.partner_id)
            if partner:
                commission = self.calculator.compute_commission(updated.to_job())
                earned = round_cents(to_decimal(partner.total_commission_earned) + commission)
                self.update_partner(partner.id, {'total_commission_earned': float(earned)})

        return updated

    def delete_job(self, job_id: str) -> bool:
        """Delete a job by ID"""
        if self._use_sheets:
            return self._sheets_client.delete_record('jobs', job_id)

        jobs = self._get_all_jobs_local()
        original_count = len(jobs)
        jobs = [job for job in jobs if job.id != job_id]

        if len(jobs) < original_count:
            self._save_jobs_local(jobs)
            return True
        return False

    def _save_jobs_local(self, jobs: List[StoredJob]):
        """Save jobs to local file"""
        with open(self.jobs_file, 'w', encoding='utf-8') as f:
            json.dump([job.to_dict() for job in jobs], f, indent=2, ensure_ascii=False)

    # ============ PARTNERS ============

    def get_all_partners(self) -> List[StoredPartner]:
        """Get all partners"""
        if self._use_sheets:
            records = self._sheets_client.get_records('partners')
            return [StoredPartner.from_dict(p) for p in records if p.get('id')]
        return self._get_all_partners_local()

    def _get_all_partners_local(self) -> List[StoredPartner]:
        """Get all partners from local file"""
        try:
            with open(self.partners_file, 'r', encoding='utf-8') as f:
                return [StoredPartner.from_dict(p) for p in json.load(f)]
        except (json.JSONDecodeError, FileNotFoundError):
            return []

    def get_partner_by_id(self, partner_id: str) -> Optional[StoredPartner]:
        """Get a partner by ID"""
        for partner in self.get_all_partners():
            if partner.id == partner_id:
                return partner
        return None

    def get_partner_by_name(self, company_name: str) -> Optional[StoredPartner]:
        """Get a partner by company name (case-insensitive)"""
        name_lower = company_name.lower().strip()
        for partner in self.get_all_partners():
            if partner.company_name.lower().strip() == name_lower:
                return partner
        return None

    def add_partner(self, company_name: str, email: str = "",
                    commission_rate: float = DEFAULT_COMMISSION_RATE) -> StoredPartner:
        """Add a new partner (Silver tier, 10% by default)"""
        existing = self.get_partner_by_name(company_name)
        if existing:
            return existing

        # Validates the rate
        Partner(id='', company_name=company_name, commission_rate=commission_rate)

        partner = StoredPartner(
            id=str(uuid.uuid4()),
            company_name=company_name.strip(),
            email=email.strip(),
            commission_rate=commission_rate,
            created_at=datetime.now().isoformat(),
        )

        if self._use_sheets:
            try:
                self._sheets_client.add_record('partners', partner.to_dict())
            except Exception as e:
                print(f"Error adding partner to sheets: {e}")
                raise
        else:
            partners = self._get_all_partners_local()
            partners.append(partner)
            self._save_partners_local(partners)
        return partner

    def update_partner(self, partner_id: str, updates: Dict[str, Any]) -> Optional[StoredPartner]:
        """Update a partner"""
        if self._use_sheets:
            result = self._sheets_client.update_record('partners', partner_id, updates)
            return StoredPartner.from_dict(result) if result else None

        partners = self._get_all_partners_local()
        for i, partner in enumerate(partners):
            if partner.id == partner_id:
                partner_dict = partner.to_dict()
                partner_dict.update(updates)
                partners[i] = StoredPartner.from_dict(partner_dict)
                self._save_partners_local(partners)
                return partners[i]
        return None

    def record_payout(self, partner_id: str, amount: float) -> Optional[StoredPartner]:
        """Record a commission payout to a partner"""
        payout = to_decimal(amount)
        if payout is None or payout <= 0:
            raise ValueError(f"Invalid payout amount: {amount!r}")

        partner = self.get_partner_by_id(partner_id)
        if partner is None:
            return None
        total_paid = round_cents(to_decimal(partner.total_paid) + payout)
        return self.update_partner(partner_id, {'total_paid': float(total_paid)})

    def _save_partners_local(self, partners: List[StoredPartner]):
        """Save partners to local file"""
        with open(self.partners_file, 'w', encoding='utf-8') as f:
            json.dump([p.to_dict() for p in partners], f, indent=2, ensure_ascii=False)

    # ============ STATISTICS ============

    def get_partner_earnings(self, partner_id: str,
                             reference_month: Optional[date] = None) -> Optional[PartnerEarnings]:
        """Get dashboard statistics for a partner"""
        partner = self.get_partner_by_id(partner_id)
        if partner is None:
            return None
        jobs = [job.to_job() for job in self.get_jobs_by_partner(partner_id)]
        return self.calculator.calculate_summary(partner.to_partner(), jobs, reference_month)
