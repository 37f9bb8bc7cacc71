"""Configuration settings for CloseBy Towing pricing and partner commissions"""

# Company Information
COMPANY_NAME = "CloseBy Towing"
COMPANY_PHONE = "(858) 999-9293"

# Online discount used only when the pricing config is unavailable or loading
FALLBACK_DISCOUNT_RATE = 0.15

# Per-mile rates (overridden by 'Travel Miles' / 'Tow Miles' config entries)
TRAVEL_RATE_PER_MILE = 1.75
TOW_RATE_PER_MILE = 8.00

TRAVEL_MILES_SERVICE = "Travel Miles"
TOW_MILES_SERVICE = "Tow Miles"

# Rate entries that are not offered as services
HIDDEN_SERVICES = {TRAVEL_MILES_SERVICE, TOW_MILES_SERVICE}

# Services billed port-to-port (no travel charge)
NO_TRAVEL_SERVICES = {"Winch-Out / Recovery", "Collision Recovery", "Impound"}

# Hard-coded standard prices shown while loading or when a lookup fails
FALLBACK_PRICES = {
    "Local Towing": 65,
    "Long-Distance Towing": 65,
    "Battery Jump Start": 88,
    "Lockout Service": 88,
    "Tire Change": 88,
    "Fuel Delivery": 88,
    "Winch-Out / Recovery": 195,
    "Collision Recovery": 195,
    "Emergency Roadside Assistance": 65,
}
DEFAULT_FALLBACK_PRICE = 65

# After-hours pricing periods are evaluated in this timezone unless configured
AFTER_HOURS_TIMEZONE = "America/Los_Angeles"

# Multipliers outside (0, MAX_TIME_MULTIPLIER] are ignored
MAX_TIME_MULTIPLIER = 10

# Seconds a successful config fetch is reused
CONFIG_CACHE_SECONDS = 60

# Partner program
DEFAULT_COMMISSION_RATE = 10  # percent, Silver tier
MEMBERSHIP_TIERS = {
    'silver': 'Silver (weekly payouts)',
    'gold': 'Gold (bi-weekly payouts)',
    'platinum': 'Platinum (same-day payouts)',
}

# Job status codes
JOB_STATUSES = {
    'pending': 'Pending',
    'accepted': 'Accepted',
    'in_progress': 'In Progress',
    'completed': 'Completed',
    'cancelled': 'Cancelled',
}

# Excel styling
EXCEL_STYLES = {
    'header_bg_color': 'D3D3D3',  # Light gray
    'summary_bg_color': 'FFBA42',  # Brand amber
    'font_name': 'Arial',
    'font_size': 10
}
