import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from studymate import main  # noqa: E402
from studymate.db import Base, get_db  # noqa: E402
from studymate.services import generation  # noqa: E402
from studymate.settings import settings  # noqa: E402
from studymate.storage import Storage  # noqa: E402


class FakeGemini:
	"""Stands in for GeminiClient; replies with whatever the test queued."""

	reply = ""
	error = None
	calls = []

	def __init__(self, *args, **kwargs):
		pass

	async def generate(self, prompt, **kwargs):
		FakeGemini.calls.append({"prompt": prompt, **kwargs})
		if FakeGemini.error is not None:
			raise FakeGemini.error
		return FakeGemini.reply

	async def generate_multimodal(self, parts, **kwargs):
		FakeGemini.calls.append({"parts": parts, **kwargs})
		if FakeGemini.error is not None:
			raise FakeGemini.error
		return FakeGemini.reply

	async def aclose(self):
		pass


@pytest.fixture(autouse=True)
def no_gemini_key(monkeypatch):
	# Tests never reach the real API
	monkeypatch.setattr(settings, "gemini_api_key", None)
	monkeypatch.setattr(settings, "openrouter_api_key", None)


@pytest.fixture
def fake_gemini(monkeypatch):
	FakeGemini.reply = ""
	FakeGemini.error = None
	FakeGemini.calls = []
	monkeypatch.setattr(generation, "GeminiClient", FakeGemini)
	return FakeGemini


@pytest.fixture
def engine(tmp_path):
	eng = create_engine(
		f"sqlite:///{tmp_path / 'test.db'}",
		connect_args={"check_same_thread": False},
		future=True,
	)
	Base.metadata.create_all(bind=eng)
	yield eng
	eng.dispose()


@pytest.fixture
def session_factory(engine):
	return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def storage(session_factory):
	db = session_factory()
	try:
		yield Storage(db)
	finally:
		db.close()


@pytest.fixture
def client(session_factory):
	def _get_db():
		db = session_factory()
		try:
			yield db
		finally:
			db.close()

	main.app.dependency_overrides[get_db] = _get_db
	try:
		yield TestClient(main.app)
	finally:
		main.app.dependency_overrides.clear()


@pytest.fixture
def demo_user(storage):
	from studymate.routers.user import get_or_create_demo_user

	return get_or_create_demo_user(storage)
