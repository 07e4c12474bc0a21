import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from shared.core.config import settings
from shared.core.database import fleet_engine, Base
from shared.exception_handler import setup_exception_handlers

from .models.inventory import inventory_items, stock_movements
from .models.garage import work_orders
from .models.maintenance import maintenance_schedules
from .models.procurement import purchase_orders
from .router.inventory import inventory_items_router, stock_movements_router
from .router.garage import work_order_router
from .router.maintenance import maintenance_schedule_router
from .router.procurement import purchase_orders_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(title="Fleet Maintenance Service API")

# Create all tables
Base.metadata.create_all(bind=fleet_engine)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Include routers
app.include_router(inventory_items_router.router)
app.include_router(stock_movements_router.router)
app.include_router(work_order_router.router)
app.include_router(maintenance_schedule_router.router)
app.include_router(purchase_orders_router.router)


@app.get("/health")
def health():
    return {"status": "ok"}
