"""
Utils Package
"""
from olpm.utils.helpers import (
    now_utc,
    utc_to_local,
    format_timestamp,
    generate_test_link,
    percentage,
    grade_for_percentage,
)
from olpm.utils.auth import (
    create_token,
    get_current_user,
    authenticate_token,
    authorize_roles,
)

__all__ = [
    'now_utc',
    'utc_to_local',
    'format_timestamp',
    'generate_test_link',
    'percentage',
    'grade_for_percentage',
    'create_token',
    'get_current_user',
    'authenticate_token',
    'authorize_roles',
]
