"""
API Endpoint URL Constants

This module defines the URL paths used throughout the application
for accessing different resources of the ride-booking platform.

These URLs are relative to the mounted application they belong to
(`/user`, `/student`, `/driver`, `/administration`, `/maintenance`).
"""

# -------------------------------
# Accounts
# -------------------------------
URL_ACCOUNT = "/account"
URL_ACCOUNT_ROLE = "/account/role"
URL_ACCOUNT_ONBOARDING = "/account/onboarding"

# -------------------------------
# Student
# -------------------------------
URL_STUDENT_COLLEGE_DRIVERS = "/driver/college"
URL_STUDENT_VERIFIED_DRIVERS = "/driver/verified"
URL_RIDE_SEARCH = "/ride/search"

# -------------------------------
# Administration
# -------------------------------
URL_DRIVER_VERIFICATION = "/driver/verification"

# -------------------------------
# Maintenance
# -------------------------------
URL_MAINTENANCE_STUDENT = "/student"
URL_MAINTENANCE_DRIVER = "/driver"
