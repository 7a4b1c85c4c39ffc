import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

os.environ["TESTING"] = "1"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("UPLOAD_DIR", "./test_uploads")

import pytest
from app.core.db import Base, SessionLocal, engine
from app.models import cart_models, order_models, product_models, user_models  # noqa: F401


@pytest.fixture(autouse=True)
def setup_db():
	Base.metadata.create_all(bind=engine)
	yield
	Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
	session = SessionLocal()
	yield session
	session.close()
