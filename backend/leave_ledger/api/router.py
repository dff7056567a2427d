from fastapi import APIRouter

from leave_ledger.api.audit import audit_router
from leave_ledger.api.balances import employee_balance_router
from leave_ledger.api.employees import employees_router
from leave_ledger.api.events import employee_events_router
from leave_ledger.api.holidays import holidays_router
from leave_ledger.api.leave_types import leave_types_router
from leave_ledger.api.requests import requests_router
from leave_ledger.api.sweeps import sweeps_router

api_router = APIRouter()
api_router.include_router(leave_types_router)
api_router.include_router(employee_balance_router)
api_router.include_router(employee_events_router)
api_router.include_router(requests_router)
api_router.include_router(sweeps_router)
api_router.include_router(holidays_router)
api_router.include_router(employees_router)
api_router.include_router(audit_router)
