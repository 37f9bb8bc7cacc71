"""
CloseBy Towing - Online Quote and Partner Dashboard
"""
import streamlit as st
import pandas as pd
from datetime import date, datetime
import tempfile
from pathlib import Path

from src.config_store import ConfigStore
from src.job_storage import JobStorage, StoredJob
from src.money import format_money
from src.price_catalog import PriceCatalog, display_price
from src.quote_calculator import QuoteCalculator, QuoteOptions, bill_miles
from src.report_generator import ReportGenerator
from config import (
    COMPANY_NAME,
    COMPANY_PHONE,
    DEFAULT_COMMISSION_RATE,
    JOB_STATUSES,
    MEMBERSHIP_TIERS,
    NO_TRAVEL_SERVICES,
)


# Initialize storage (cached across reruns)
@st.cache_resource
def _get_storage():
    return JobStorage()


@st.cache_resource
def _get_config_store():
    return ConfigStore()


storage = _get_storage()


def _load_catalog() -> PriceCatalog:
    """One config read per page load; every price on the page uses it."""
    catalog = PriceCatalog(_get_config_store())
    with st.spinner("Loading prices..."):
        catalog.load()
    return catalog


def page_quote():
    """Customer quote popup"""
    catalog = _load_catalog()
    discount_text = catalog.get_discount_text()

    st.header("🚚 Get an Instant Price")
    st.markdown(f"Book online and save **{discount_text}** + priority dispatch.")

    if catalog.error:
        st.warning(catalog.error)

    services = catalog.list_services()
    if not services:
        st.info(f"📞 Call {COMPANY_PHONE} for a price.")
        return

    # Service picker
    cols = st.columns(3)
    for i, service in enumerate(services):
        lookup = catalog.get_service_price(service.service_name)
        with cols[i % 3]:
            st.markdown(f"**{service.label}**")
            st.markdown(f"from **{display_price(lookup)}** ~~{display_price(lookup, online=False)}~~")

    names = [s.service_name for s in services]
    service_name = st.selectbox("What do you need?", options=names)
    lookup = catalog.get_service_price(service_name)

    col1, col2 = st.columns(2)
    with col1:
        travel_miles = None
        if service_name not in NO_TRAVEL_SERVICES:
            travel_miles = st.number_input("Miles from our truck to you", min_value=0.0, value=0.0, step=1.0)
    with col2:
        tow_miles = None
        if lookup.is_towing:
            tow_miles = st.number_input("Tow distance (miles)", min_value=0.0, value=0.0, step=1.0)

    travel_rate, tow_rate = catalog.get_mileage_rates()
    calculator = QuoteCalculator(travel_rate=travel_rate, tow_rate=tow_rate)
    quote = calculator.quote_for_service(
        lookup,
        QuoteOptions(travel_miles=bill_miles(travel_miles), tow_miles_distance=bill_miles(tow_miles)),
        catalog.policy,
        catalog.get_time_multiplier(),
    )

    if quote is None:
        st.markdown("Total: **$...**")
        return

    st.markdown("---")
    st.subheader(f"🏷️ {discount_text} Online Discount Applied")
    rows = [{
        'Item': line.label,
        'Price': '' if line.is_indicator else format_money(line.discounted_amount),
        'Regular': '' if line.is_indicator else format_money(line.original_amount),
    } for line in quote.lines]
    rows.append({
        'Item': 'Total',
        'Price': format_money(quote.total),
        'Regular': format_money(quote.original_total),
    })
    st.table(pd.DataFrame(rows))
    st.success(f"You save {format_money(quote.savings)} by booking online")

    if quote.degraded:
        st.caption(f"Estimate only. Call {COMPANY_PHONE} to confirm pricing.")


def page_dashboard():
    """Partner dashboard with referral earnings"""
    st.header("🤝 Partner Dashboard")

    partners = storage.get_all_partners()
    if not partners:
        st.info("📭 No partners yet. Add one in Partners.")
        return

    partner_names = {p.company_name: p.id for p in partners}
    selected = st.selectbox("Partner", options=list(partner_names))
    partner_id = partner_names[selected]

    earnings = storage.get_partner_earnings(partner_id, date.today())
    partner = earnings.partner

    tier = MEMBERSHIP_TIERS.get(partner.membership_tier.lower(), partner.membership_tier)
    st.caption(f"Tier: {tier}")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Total Referrals", earnings.total_referrals)
    with col2:
        st.metric("Total Earned", format_money(earnings.total_commission_earned))
    with col3:
        st.metric("Commission Owed", format_money(earnings.display_commission_owed))
    with col4:
        st.metric("Commission Rate", f"{partner.commission_rate:g}%")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Pending", earnings.pending_referrals)
    with col2:
        st.metric("Completed", earnings.completed_referrals)
    with col3:
        st.metric("This Month", format_money(earnings.month_earnings))

    st.markdown("### 📋 Referrals")
    generator = ReportGenerator(partner)
    generator.add_jobs(earnings.jobs)
    if earnings.jobs:
        st.dataframe(generator.to_dataframe(), use_container_width=True, hide_index=True)

        with tempfile.NamedTemporaryFile(delete=False, suffix='.xlsx') as tmp:
            tmp_path = tmp.name
        generator.export_excel(tmp_path)
        with open(tmp_path, 'rb') as f:
            excel_data = f.read()
        Path(tmp_path).unlink(missing_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d')
        st.download_button(
            label="📊 Download Statement",
            data=excel_data,
            file_name=f"{partner.company_name.replace(' ', '_')}_{timestamp}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    else:
        st.info("Start referring customers to earn commissions!")

    st.caption("Commissions are calculated on the final service cost at the rate in effect when the job was referred.")


def page_partners():
    """Manage partners, referrals, completions and payouts"""
    st.header("👥 Partners")

    with st.expander("➕ Add New Partner"):
        company = st.text_input("Business name", key="new_partner_name")
        email = st.text_input("Email", key="new_partner_email")
        rate = st.slider("Commission Rate (%)", 0, 100, DEFAULT_COMMISSION_RATE, 1, key="new_partner_rate")
        if st.button("Add Partner", type="primary"):
            if company.strip():
                storage.add_partner(company.strip(), email, rate)
                st.success(f"Added: {company}")
                st.rerun()
            else:
                st.error("Please enter a business name")

    partners = storage.get_all_partners()
    if not partners:
        return

    partner_names = {p.company_name: p for p in partners}
    partner = partner_names[st.selectbox("Partner", options=list(partner_names), key="manage_partner")]

    with st.expander("📝 Refer a Job"):
        customer = st.text_input("Customer name", key="ref_customer")
        service = st.text_input("Service", value="Local Towing", key="ref_service")
        if st.button("Submit Referral"):
            storage.add_job(StoredJob(id="", partner_id=partner.id,
                                      customer_name=customer, service=service))
            st.success("Referral submitted")
            st.rerun()

    open_jobs = [j for j in storage.get_jobs_by_partner(partner.id)
                 if j.status not in ('completed', 'cancelled')]
    if open_jobs:
        st.markdown("### 🔧 Open Jobs")
        for job in open_jobs:
            col1, col2, col3 = st.columns([3, 2, 1])
            with col1:
                st.write(f"{job.customer_name or 'Customer'} - {job.service} "
                         f"({JOB_STATUSES[job.status]}, {job.commission_rate:g}%)")
            with col2:
                price = st.number_input("Final price", min_value=0.0, step=5.0, key=f"price_{job.id}")
            with col3:
                if st.button("✅ Complete", key=f"complete_{job.id}"):
                    storage.complete_job(job.id, price)
                    st.rerun()

    st.markdown("### 💵 Record Payout")
    amount = st.number_input("Amount", min_value=0.0, step=10.0, key="payout_amount")
    if st.button("Record Payout") and amount > 0:
        storage.record_payout(partner.id, amount)
        st.success(f"Recorded {format_money(storage.get_partner_by_id(partner.id).to_partner().total_paid)} paid to date")


def main():
    st.set_page_config(
        page_title=f"{COMPANY_NAME} - Quotes & Partners",
        page_icon="🚚",
        layout="wide"
    )

    # Sidebar navigation
    st.sidebar.title(f"🚚 {COMPANY_NAME}")
    st.sidebar.markdown(f"📞 {COMPANY_PHONE}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigation",
        ["🏷️ Get a Quote", "🤝 Partner Dashboard", "👥 Partners"],
        label_visibility="collapsed"
    )

    # Page routing
    if page == "🏷️ Get a Quote":
        page_quote()
    elif page == "🤝 Partner Dashboard":
        page_dashboard()
    elif page == "👥 Partners":
        page_partners()


if __name__ == '__main__':
    main()
