import asyncio
import json

import httpx
import pytest

from studymate.gemini_client import GeminiClient
from studymate.settings import settings


def _client_with(handler, **kwargs):
	client = GeminiClient(api_key="test-key", **kwargs)
	client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
	return client


def _ok(text):
	return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def test_missing_key_raises():
	with pytest.raises(ValueError):
		GeminiClient()


def test_generate_sends_system_instruction_and_schema():
	seen = {}

	def handler(request: httpx.Request):
		seen["url"] = str(request.url)
		seen["body"] = json.loads(request.content)
		return _ok("[]")

	async def go():
		client = _client_with(handler, model="gemini-test")
		try:
			return await client.generate("hi", system_instruction="be nice", response_schema={"type": "ARRAY"})
		finally:
			await client.aclose()

	assert asyncio.run(go()) == "[]"
	assert "models/gemini-test:generateContent" in seen["url"]
	assert "key=test-key" in seen["url"]
	body = seen["body"]
	assert body["contents"] == [{"role": "user", "parts": [{"text": "hi"}]}]
	assert body["systemInstruction"] == {"parts": [{"text": "be nice"}]}
	assert body["generationConfig"]["responseMimeType"] == "application/json"


def test_schema_rejection_retries_without_generation_config():
	bodies = []

	def handler(request: httpx.Request):
		body = json.loads(request.content)
		bodies.append(body)
		if "generationConfig" in body:
			return httpx.Response(400, json={"error": "schema unsupported"})
		return _ok("plain")

	async def go():
		client = _client_with(handler)
		try:
			return await client.generate("hi", response_schema={"type": "OBJECT"})
		finally:
			await client.aclose()

	assert asyncio.run(go()) == "plain"
	assert len(bodies) == 2


def test_server_error_propagates_without_openrouter():
	def handler(request: httpx.Request):
		return httpx.Response(503, json={"error": "unavailable"})

	async def go():
		client = _client_with(handler)
		try:
			await client.generate("hi")
		finally:
			await client.aclose()

	with pytest.raises(httpx.HTTPStatusError):
		asyncio.run(go())


def test_unexpected_body_raises_runtime_error():
	def handler(request: httpx.Request):
		return httpx.Response(200, json={"candidates": []})

	async def go():
		client = _client_with(handler)
		try:
			await client.generate("hi")
		finally:
			await client.aclose()

	with pytest.raises(RuntimeError):
		asyncio.run(go())


def test_openrouter_fallback_used_when_configured(monkeypatch):
	monkeypatch.setattr(settings, "openrouter_api_key", "or-key")

	def gemini_handler(request: httpx.Request):
		return httpx.Response(500, json={})

	def openrouter_handler(request: httpx.Request):
		body = json.loads(request.content)
		assert body["messages"][0] == {"role": "system", "content": "sys"}
		assert request.headers["authorization"] == "Bearer or-key"
		return httpx.Response(200, json={"choices": [{"message": {"content": "from openrouter"}}]})

	async def go():
		client = _client_with(gemini_handler)
		client._fallback_client = httpx.AsyncClient(transport=httpx.MockTransport(openrouter_handler))
		try:
			return await client.generate("hi", system_instruction="sys")
		finally:
			await client.aclose()

	assert asyncio.run(go()) == "from openrouter"
