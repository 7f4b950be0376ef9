import os
import tempfile

# Must run before the application package is imported
_DB_DIR = tempfile.mkdtemp(prefix="haccp-tests-")
os.environ["DB_URI"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
for _var in ("SMTP_HOST", "SMTP_USER", "SMTP_PASSWORD", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID"):
    os.environ[_var] = ""
os.environ["SEED_ADMIN_USERNAME"] = "super"
os.environ["SEED_ADMIN_PASSWORD"] = "super"

import pytest

from haccp.core.security import hash_password
from haccp.db.session import Base, SessionLocal, init_db
from haccp.main import seed_defaults
from haccp.models.facility import Facility, Refrigerator
from haccp.models.user import User
from haccp.services.repository import HaccpRepository


def _reset(db):
    for table in reversed(Base.metadata.sorted_tables):
        db.execute(table.delete())
    db.commit()


@pytest.fixture
def db():
    init_db()
    session = SessionLocal()
    try:
        _reset(session)
        seed_defaults(session)
        yield session
    finally:
        session.close()


@pytest.fixture
def repo(db):
    return HaccpRepository(db)


@pytest.fixture
def world(db):
    """Facility F1 with a fridge and a freezer, plus alert subscribers."""
    db.add_all([
        Facility(id="F1", name="Kantine Nord", cooking_method_id="CM1"),
        Facility(id="F2", name="Kita Süd"),
        Refrigerator(id="K1", name="Kühlschrank 1", facility_id="F1", type_id="RT1"),
        Refrigerator(id="T1", name="Tiefkühler 1", facility_id="F1", type_id="RT2"),
        Refrigerator(id="K9", name="Kühlschrank ohne Typ", facility_id="F1", type_id=None),
        User(id="U-A", name="Anna", username="anna", hashed_password=hash_password("anna"),
             email="anna@example.com", role="Manager", status="Active", facility_id="F1", email_alerts=True),
        User(id="U-B", name="Ben", username="ben", hashed_password=hash_password("ben"),
             role="Admin", status="Active", facility_id="F2", telegram_alerts=True, all_facilities_alerts=True),
        User(id="U-C", name="Carla", username="carla", hashed_password=hash_password("carla"),
             email="carla@example.com", role="User", status="Inactive", facility_id="F1",
             email_alerts=True, telegram_alerts=True),
        User(id="U-D", name="Dirk", username="dirk", hashed_password=hash_password("dirk"),
             role="User", status="Active", facility_id="F1"),
    ])
    db.commit()
    return db
