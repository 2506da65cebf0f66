from datetime import date
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from travel_pricing import __version__
from travel_pricing.engine.models import DemandFactors, PricingContext, ServiceType
from travel_pricing.engine.seasonal_calendar import SeasonalCalendar
from travel_pricing.logging_config import configure_logging
from travel_pricing.api.rules_api import router as rules_router
from travel_pricing.api.state import engine, settings

configure_logging(settings.log_level)

app = FastAPI(
    title="Travel Pricing API",
    description="Dynamic pricing rule engine for the booking back office",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include rules management API
app.include_router(rules_router)

calendar = SeasonalCalendar()


class DemandFactorsIn(BaseModel):
    current_bookings: float = Field(ge=0)
    available_slots: float = Field(ge=0)
    popularity_score: float = 0.0


class CalcRequest(BaseModel):
    service_id: str
    service_type: ServiceType
    base_price: float = Field(ge=0)
    currency: str = "VND"
    booking_date: date
    service_date: date
    duration: Optional[float] = None
    group_size: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    demand_factors: Optional[DemandFactorsIn] = None

    def to_context(self) -> PricingContext:
        demand = None
        if self.demand_factors:
            demand = DemandFactors(**self.demand_factors.model_dump())
        return PricingContext(
            service_id=self.service_id,
            service_type=self.service_type,
            base_price=self.base_price,
            currency=self.currency,
            booking_date=self.booking_date,
            service_date=self.service_date,
            duration=self.duration,
            group_size=self.group_size,
            location=self.location,
            demand_factors=demand,
        )


@app.get("/")
async def root():
    return {"status": "online", "message": "Travel Pricing API Active"}


@app.post("/calculate")
async def calculate_price(req: CalcRequest):
    try:
        result = engine.price(req.to_context())
        return result.to_dict()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/calculate/batch")
async def calculate_batch(reqs: List[CalcRequest]):
    try:
        return [engine.price(req.to_context()).to_dict() for req in reqs]
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/season/{service_date}")
async def get_season(service_date: date):
    return {
        "date": service_date.isoformat(),
        "season": calendar.season_of(service_date),
        "base_season": calendar.base_season(service_date),
    }


@app.get("/system/status")
async def get_status():
    repository = engine.repository
    return {
        "engine_active": True,
        "repository": type(repository).__name__,
        "rules_loaded": getattr(repository, 'loaded', True),
        "rules_count": len(repository.all_rules()),
        "tax_rate": settings.tax_rate,
        "quote_ttl_hours": settings.quote_ttl_hours,
    }
