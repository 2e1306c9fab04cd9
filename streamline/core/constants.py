"""
Domain constants shared by schemas and endpoints.

Reference data for onboarding (industries, company sizes, countries with
their currency and default time zone, US state / Canadian province zones)
plus the enumerations used across members, invitations and billing.
"""

from __future__ import annotations

# ── Membership ─────────────────────────────────────────────────────
MEMBER_ROLES = ("admin", "staff")
PAY_PERIODS = ("hourly",)
ADMIN_TITLES = ("owner", "manager", "supervisor", "admin")

# ── Invitations ────────────────────────────────────────────────────
INVITATION_PENDING = "pending"
INVITATION_ACCEPTED = "accepted"
INVITATION_EXPIRED = "expired"
INVITATION_STATUSES = (INVITATION_PENDING, INVITATION_ACCEPTED, INVITATION_EXPIRED)

# ── Jobs ───────────────────────────────────────────────────────────
DEFAULT_JOB_NAME = "General Work"

# ── Geofencing ─────────────────────────────────────────────────────
GEOFENCE_ENTER = "enter"
GEOFENCE_EXIT = "exit"
MAX_GEOFENCE_RADIUS_METERS = 100_000

# ── Billing ────────────────────────────────────────────────────────
SUBSCRIPTION_STATUSES = ("active", "canceled", "past_due", "incomplete", "trialing")
BILLING_CYCLES = ("monthly", "yearly")
UNLIMITED = -1
PLAN_FEATURES = (
    "time_tracking",
    "basic_reports",
    "advanced_reports",
    "gps_tracking",
    "payroll_export",
    "email_support",
    "priority_support",
    "custom_branding",
    "api_access",
    "white_label",
    "dedicated_support",
)


def _features(*enabled: str) -> dict[str, bool]:
    return {name: name in enabled for name in PLAN_FEATURES}


DEFAULT_PLANS: list[dict] = [
    {
        "name": "Starter",
        "description": "Time tracking for small crews",
        "price_monthly": 29.0,
        "price_yearly": 290.0,
        "max_employees": 5,
        "max_jobs": 3,
        "features": _features("time_tracking", "basic_reports", "gps_tracking", "email_support"),
        "sort_order": 1,
    },
    {
        "name": "Professional",
        "description": "GPS tracking, payroll export and advanced reporting",
        "price_monthly": 79.0,
        "price_yearly": 790.0,
        "max_employees": 25,
        "max_jobs": UNLIMITED,
        "features": _features(
            "time_tracking",
            "basic_reports",
            "advanced_reports",
            "gps_tracking",
            "payroll_export",
            "priority_support",
        ),
        "sort_order": 2,
    },
    {
        "name": "Enterprise",
        "description": "Unlimited teams with branding, API access and dedicated support",
        "price_monthly": 199.0,
        "price_yearly": 1990.0,
        "max_employees": UNLIMITED,
        "max_jobs": UNLIMITED,
        "features": _features(*PLAN_FEATURES),
        "sort_order": 3,
    },
]

# ── Onboarding reference data ──────────────────────────────────────
INDUSTRIES = (
    "Construction",
    "Landscaping & Lawn Care",
    "Cleaning Services",
    "Field Services",
    "Maintenance & Repair",
    "Security Services",
    "Transportation & Logistics",
    "Healthcare & Medical",
    "Real Estate",
    "Property Management",
    "Retail & Sales",
    "Food & Beverage",
    "Hospitality",
    "Manufacturing",
    "Technology & IT",
    "Consulting",
    "Legal Services",
    "Accounting & Finance",
    "Marketing & Advertising",
    "Education & Training",
    "Fitness & Wellness",
    "Beauty & Personal Care",
    "Automotive Services",
    "Pet Services",
    "Event Planning",
    "Photography & Videography",
    "Graphic Design",
    "Writing & Content",
    "Translation Services",
    "Virtual Assistant",
    "Other",
)

COMPANY_SIZES = ("1-5", "6-25", "26-100", "101-500", "500+")

FALLBACK_TIMEZONE = "America/New_York"
FALLBACK_CURRENCY = "USD"

# code -> (currency, default time zone)
COUNTRIES: dict[str, tuple[str, str]] = {
    "US": ("USD", "America/New_York"),
    "CA": ("CAD", "America/Toronto"),
    "GB": ("GBP", "Europe/London"),
    "AU": ("AUD", "Australia/Sydney"),
    "DE": ("EUR", "Europe/Berlin"),
    "FR": ("EUR", "Europe/Paris"),
    "IT": ("EUR", "Europe/Rome"),
    "ES": ("EUR", "Europe/Madrid"),
    "NL": ("EUR", "Europe/Amsterdam"),
    "BE": ("EUR", "Europe/Brussels"),
    "CH": ("CHF", "Europe/Zurich"),
    "AT": ("EUR", "Europe/Vienna"),
    "SE": ("SEK", "Europe/Stockholm"),
    "NO": ("NOK", "Europe/Oslo"),
    "DK": ("DKK", "Europe/Copenhagen"),
    "FI": ("EUR", "Europe/Helsinki"),
    "IE": ("EUR", "Europe/Dublin"),
    "PT": ("EUR", "Europe/Lisbon"),
    "JP": ("JPY", "Asia/Tokyo"),
    "KR": ("KRW", "Asia/Seoul"),
    "SG": ("SGD", "Asia/Singapore"),
    "HK": ("HKD", "Asia/Hong_Kong"),
    "IN": ("INR", "Asia/Kolkata"),
    "CN": ("CNY", "Asia/Shanghai"),
    "BR": ("BRL", "America/Sao_Paulo"),
    "MX": ("MXN", "America/Mexico_City"),
    "AR": ("ARS", "America/Argentina/Buenos_Aires"),
    "CL": ("CLP", "America/Santiago"),
    "CO": ("COP", "America/Bogota"),
    "PE": ("PEN", "America/Lima"),
    "ZA": ("ZAR", "Africa/Johannesburg"),
    "EG": ("EGP", "Africa/Cairo"),
    "NG": ("NGN", "Africa/Lagos"),
    "KE": ("KES", "Africa/Nairobi"),
    "MA": ("MAD", "Africa/Casablanca"),
    "IL": ("ILS", "Asia/Jerusalem"),
    "AE": ("AED", "Asia/Dubai"),
    "SA": ("SAR", "Asia/Riyadh"),
    "TH": ("THB", "Asia/Bangkok"),
    "MY": ("MYR", "Asia/Kuala_Lumpur"),
    "ID": ("IDR", "Asia/Jakarta"),
    "PH": ("PHP", "Asia/Manila"),
    "VN": ("VND", "Asia/Ho_Chi_Minh"),
    "NZ": ("NZD", "Pacific/Auckland"),
    "TR": ("TRY", "Europe/Istanbul"),
    "PL": ("PLN", "Europe/Warsaw"),
    "CZ": ("CZK", "Europe/Prague"),
    "HU": ("HUF", "Europe/Budapest"),
    "RO": ("RON", "Europe/Bucharest"),
    "BG": ("BGN", "Europe/Sofia"),
    "SI": ("EUR", "Europe/Ljubljana"),
    "SK": ("EUR", "Europe/Bratislava"),
    "LT": ("EUR", "Europe/Vilnius"),
    "LV": ("EUR", "Europe/Riga"),
    "EE": ("EUR", "Europe/Tallinn"),
}

US_STATE_TIMEZONES: dict[str, str] = {
    "AL": "America/Chicago", "AK": "America/Anchorage", "AZ": "America/Phoenix",
    "AR": "America/Chicago", "CA": "America/Los_Angeles", "CO": "America/Denver",
    "CT": "America/New_York", "DE": "America/New_York", "FL": "America/New_York",
    "GA": "America/New_York", "HI": "Pacific/Honolulu", "ID": "America/Denver",
    "IL": "America/Chicago", "IN": "America/New_York", "IA": "America/Chicago",
    "KS": "America/Chicago", "KY": "America/New_York", "LA": "America/Chicago",
    "ME": "America/New_York", "MD": "America/New_York", "MA": "America/New_York",
    "MI": "America/New_York", "MN": "America/Chicago", "MS": "America/Chicago",
    "MO": "America/Chicago", "MT": "America/Denver", "NE": "America/Chicago",
    "NV": "America/Los_Angeles", "NH": "America/New_York", "NJ": "America/New_York",
    "NM": "America/Denver", "NY": "America/New_York", "NC": "America/New_York",
    "ND": "America/Chicago", "OH": "America/New_York", "OK": "America/Chicago",
    "OR": "America/Los_Angeles", "PA": "America/New_York", "RI": "America/New_York",
    "SC": "America/New_York", "SD": "America/Chicago", "TN": "America/Chicago",
    "TX": "America/Chicago", "UT": "America/Denver", "VT": "America/New_York",
    "VA": "America/New_York", "WA": "America/Los_Angeles", "WV": "America/New_York",
    "WI": "America/Chicago", "WY": "America/Denver",
}

CA_PROVINCE_TIMEZONES: dict[str, str] = {
    "AB": "America/Edmonton",
    "BC": "America/Vancouver",
    "MB": "America/Winnipeg",
    "NB": "America/Moncton",
    "NL": "America/St_Johns",
    "NS": "America/Halifax",
    "ON": "America/Toronto",
    "PE": "America/Halifax",
    "QC": "America/Montreal",
    "SK": "America/Regina",
    "NT": "America/Yellowknife",
    "NU": "America/Iqaluit",
    "YT": "America/Whitehorse",
}


def timezone_for_location(country: str, state: str | None = None) -> str:
    """Default IANA zone for a country, refined by US state / CA province."""
    country = (country or "").upper()
    state = (state or "").upper()
    if country == "US" and state:
        return US_STATE_TIMEZONES.get(state, FALLBACK_TIMEZONE)
    if country == "CA" and state:
        return CA_PROVINCE_TIMEZONES.get(state, "America/Toronto")
    entry = COUNTRIES.get(country)
    return entry[1] if entry else FALLBACK_TIMEZONE


def currency_for_country(country: str) -> str:
    entry = COUNTRIES.get((country or "").upper())
    return entry[0] if entry else FALLBACK_CURRENCY
