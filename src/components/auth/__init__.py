"""
Auth component - Dashboard administrator authentication.

Handles login, logout, session verification and admin provisioning.
"""

from .component import (
    run,
    run_create_admin,
    run_get_profile,
    run_login,
    run_logout,
    run_verify_session,
)
from .models import (
    AuthOutput,
    CreateAdminInput,
    LoginInput,
    LogoutInput,
    ProfileInput,
    VerifySessionInput,
)
from .ports import (
    AdminRepoPort,
    AuthAdapterPort,
    SessionStorePort,
    TimePort,
)

__all__ = [
    # Entry points
    "run",
    "run_create_admin",
    "run_get_profile",
    "run_login",
    "run_logout",
    "run_verify_session",
    # Models
    "AuthOutput",
    "CreateAdminInput",
    "LoginInput",
    "LogoutInput",
    "ProfileInput",
    "VerifySessionInput",
    # Ports
    "AdminRepoPort",
    "AuthAdapterPort",
    "SessionStorePort",
    "TimePort",
]
