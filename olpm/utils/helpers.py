"""
Helper Functions
Utility functions used across the application
"""
from datetime import datetime, timezone
from flask import current_app
import secrets
import string
import pytz

LINK_ALPHABET = string.ascii_lowercase + string.digits


def now_utc():
    """Get current UTC timestamp"""
    return datetime.now(timezone.utc)


def utc_to_local(utc_dt, tz_name=None):
    """Convert a UTC datetime to the configured display time zone"""
    if not utc_dt:
        return None
    tz = pytz.timezone(tz_name or current_app.config.get('TIMEZONE', 'UTC'))
    if utc_dt.tzinfo is None:
        # SQLite hands back naive values; they were written as UTC
        utc_dt = utc_dt.replace(tzinfo=pytz.utc)
    return utc_dt.astimezone(tz)


def format_timestamp(utc_dt):
    """ISO-8601 string in the display time zone, or None"""
    local = utc_to_local(utc_dt)
    return local.isoformat() if local else None


def generate_test_link(prefix='test-', length=12):
    """Generate an unguessable shareable test link"""
    return prefix + "".join(secrets.choice(LINK_ALPHABET) for _ in range(length))


def percentage(score, total):
    """Score as a percentage rounded to 2 places; 0 when there is nothing to score"""
    if not total:
        return 0.0
    return round(score * 100.0 / total, 2)


def grade_for_percentage(pct):
    """Grade band used in results, exports and analytics"""
    if pct is None:
        return None
    if pct >= 80:
        return 'Excellent'
    if pct >= 60:
        return 'Good'
    if pct >= 40:
        return 'Average'
    return 'Needs Improvement'
