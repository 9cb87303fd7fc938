import os
import tempfile
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from wizard_scorer.api.deps import get_db
from wizard_scorer.core.database import Base
from wizard_scorer.models.bid import Bid
from wizard_scorer.models.game import Game
from wizard_scorer.models.game_player import GamePlayer
from wizard_scorer.models.game_round import Round
from wizard_scorer.models.player import Player
from main import app


@pytest.fixture(scope="session")
def test_db():
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()
    os.close(db_fd)
    os.unlink(db_path)

@pytest.fixture
def db_session(test_db):
    session = test_db()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

@pytest.fixture
def db_cleanup(db_session):
    for model in [Bid, Round, GamePlayer, Game, Player]:
        db_session.query(model).delete()
    db_session.commit()

@pytest.fixture
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
