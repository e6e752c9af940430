import io

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.auth import create_access_token
from app.database import Base, build_engine, get_db
from app.identity import Identity
from app.main import app
from app.models import User, VideoVisibility
from app.services import publishing
from app.storage.asset_store import LocalAssetStore, get_asset_store


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(tmp_path):
    return LocalAssetStore(tmp_path / "assets", "/media/videos")


def _make_user(db, email: str) -> User:
    user = User(email=email, full_name=email.split("@")[0])
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def alice(db):
    return _make_user(db, "alice@example.com")


@pytest.fixture
def bob(db):
    return _make_user(db, "bob@example.com")


@pytest.fixture
def carol(db):
    return _make_user(db, "carol@example.com")


@pytest.fixture
def upload(db, store):
    """Upload a small fake mp4 through the publishing pipeline."""

    def _upload(owner: User, title: str = "Clip", visibility=VideoVisibility.PUBLIC, **kwargs):
        return publishing.upload_video(
            db,
            store,
            Identity(owner.id),
            io.BytesIO(kwargs.pop("data", b"\x00\x00\x00\x18ftypmp42")),
            filename=kwargs.pop("filename", "clip.mp4"),
            content_type=kwargs.pop("content_type", "video/mp4"),
            title=title,
            visibility=visibility,
            **kwargs,
        )

    return _upload


@pytest.fixture
def client(session_factory, store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_asset_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}

    return _headers
