import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from .core.config import settings
from .db.session import init_db, SessionLocal
from .api import alerts, audit, auth, catalog, facilities, readings, settings as settings_api, users
from .models.equipment import Checkpoint, EquipmentType
from .models.user import User
from .core.security import hash_password
from .services.thresholds import DEFAULT_TYPES

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="HACCP Compliance Log API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_credentials=True, allow_methods=["*"], allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(facilities.router)
app.include_router(catalog.router)
app.include_router(readings.router)
app.include_router(alerts.router)
app.include_router(settings_api.router)
app.include_router(audit.router)


def seed_defaults(db: Session):
    """Install the default threshold types and a SuperAdmin when missing."""
    added = False
    for t in DEFAULT_TYPES:
        if db.get(EquipmentType, t["id"]) is None:
            db.add(EquipmentType(
                id=t["id"], name=t["name"], kind=t["kind"],
                checkpoints=[Checkpoint(**cp) for cp in t["checkpoints"]],
            ))
            added = True
    if not db.query(User).first():
        db.add(User(
            id="U-SUPER", name="System SuperAdmin", username=settings.SEED_ADMIN_USERNAME,
            hashed_password=hash_password(settings.SEED_ADMIN_PASSWORD), role="SuperAdmin", status="Active",
        ))
        added = True
    if added:
        db.commit()
        logger.info("Seeded default threshold types and administrator")


@app.on_event("startup")
def on_startup():
    init_db()
    db = SessionLocal()
    try:
        seed_defaults(db)
    finally:
        db.close()

@app.get("/health")
def health(): return {"ok": True}
