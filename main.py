import logging
import sys
from fastapi import FastAPI

from workpulse.config import LOG_LEVEL
from workpulse.database import SessionLocal, init_db
from workpulse.events import DataResetNotifier
from workpulse.routers import api
from workpulse.services.alerts import DesktopAlerter
from workpulse.services.audio import AmbientAudio
from workpulse.services.clock import IntervalClock
from workpulse.services.records import RecordStore
from workpulse.services.statistics import SessionHistory, TodayAggregator
from workpulse.services.timer import FocusTimer
from workpulse.version import get_version


def setup_logging() -> logging.Logger:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    return logging.getLogger("workpulse")


logger = setup_logging()

app = FastAPI(title="WorkPulse", description="Personal focus timer", version=get_version())

# Include routers
app.include_router(api.router)


@app.on_event("startup")
def startup_event():
    init_db()

    store = RecordStore(SessionLocal, DataResetNotifier())
    aggregator = TodayAggregator(store)
    app.state.store = store
    app.state.history = SessionHistory(store)
    app.state.timer = FocusTimer(
        store=store,
        aggregator=aggregator,
        alerter=DesktopAlerter(),
        clock=IntervalClock(),
        audio=AmbientAudio(),
    )
    logger.info("WorkPulse %s ready, today's focus so far: %ss", get_version(), aggregator.total)


@app.on_event("shutdown")
def shutdown_event():
    timer = getattr(app.state, "timer", None)
    if timer is not None:
        timer.shutdown()


if __name__ == "__main__":
    import uvicorn
    from workpulse.config import HOST, PORT

    uvicorn.run("main:app", host=HOST, port=PORT, reload=True)
