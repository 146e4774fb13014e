import logging

from fastapi import FastAPI

from washbook.api.v1.bookings import router as bookings_router
from washbook.api.v1.customers import router as customers_router
from washbook.api.v1.plates import router as plates_router
from washbook.core.config import settings


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("booking_id", "step", "vehicle_id", "order_id", "reason", "operation"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="Car Wash Booking", version="1.0.0")

app.include_router(plates_router, prefix="/v1/plates", tags=["plates"])
app.include_router(bookings_router, prefix="/v1/bookings", tags=["bookings"])
app.include_router(customers_router, prefix="/v1", tags=["customers"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
