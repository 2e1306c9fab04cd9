"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from streamline.api.v1.endpoints import (auth, billing, companies, employees,
                                         geofences, invitations, jobs, reports,
                                         timesheets)

api_router = APIRouter()

# Sign-up, login, refresh, profile
api_router.include_router(auth.router)

# Onboarding, company profile, location settings
api_router.include_router(companies.router)

# Members and the invitation workflow
api_router.include_router(employees.router)
api_router.include_router(invitations.router)

# Jobs, clock-in/out, live locations, geofences
api_router.include_router(jobs.router)
api_router.include_router(timesheets.router)
api_router.include_router(geofences.router)

# Payroll, reports, health
api_router.include_router(reports.router)

# Plans, subscription, mock checkout
api_router.include_router(billing.router)
