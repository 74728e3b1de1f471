from fastapi import APIRouter

from .app_users import router as app_users_router
from .attendance import router as attendance_router
from .banks import router as banks_router
from .customers import router as customers_router
from .debug import router as debug_router
from .driver_budgets import router as driver_budgets_router
from .entries import router as entries_router
from .exports import router as exports_router
from .fuel_tracking import router as fuel_tracking_router
from .invoices import router as invoices_router
from .lookups import router as lookups_router
from .maintenance import router as maintenance_router
from .trips import router as trips_router
from .vehicles import router as vehicles_router

api_router = APIRouter(prefix="/api")
api_router.include_router(app_users_router, prefix="/app-users", tags=["app-users"])
api_router.include_router(vehicles_router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(customers_router, prefix="/customers", tags=["customers"])
api_router.include_router(lookups_router, tags=["lookups"])
api_router.include_router(banks_router, tags=["banks"])
api_router.include_router(entries_router, tags=["income-expenses"])
api_router.include_router(
    fuel_tracking_router, prefix="/fuel-tracking", tags=["fuel-tracking"]
)
api_router.include_router(
    driver_budgets_router, prefix="/driver-budgets", tags=["driver-budgets"]
)
api_router.include_router(maintenance_router, prefix="/maintenance", tags=["maintenance"])
api_router.include_router(trips_router, prefix="/trips", tags=["trips"])
api_router.include_router(attendance_router, prefix="/attendance", tags=["attendance"])
api_router.include_router(invoices_router, prefix="/invoices", tags=["invoices"])
api_router.include_router(exports_router, tags=["exports"])
api_router.include_router(debug_router, tags=["debug"])
