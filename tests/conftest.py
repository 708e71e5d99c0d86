"""Shared test fixtures and configuration."""

import base64
import io
from unittest.mock import Mock

import pytest
from PIL import Image

from filterstudio.catalog import StyleCatalog, StyleConfig
from filterstudio.generation.clients import BaseGenerator, GeneratorResult
from filterstudio.metadata import MetadataWriter
from filterstudio.storage import ArtifactStore

TEST_PASSWORD = "let-me-in"
TEST_API_KEY = "sk-test-key"


def make_png(color="red", size=(64, 64)) -> bytes:
    img_byte_arr = io.BytesIO()
    Image.new("RGB", size, color=color).save(img_byte_arr, format="PNG")
    return img_byte_arr.getvalue()


@pytest.fixture
def png_bytes():
    """Return a small PNG image as bytes."""
    return make_png()


@pytest.fixture
def jpeg_bytes():
    """Return a small JPEG image as bytes."""
    img_byte_arr = io.BytesIO()
    Image.new("RGB", (32, 32), color="green").save(img_byte_arr, format="JPEG")
    return img_byte_arr.getvalue()


@pytest.fixture
def generated_png():
    """Bytes the fake image API 'generates'."""
    return make_png(color="blue", size=(128, 128))


@pytest.fixture
def single_style():
    return StyleConfig(
        id="chibi-sticker",
        name="Chibi Sticker Pack",
        prompt_template="Make chibi stickers of the character.",
        details_label="Additional customization",
        default_details="Default chibi style",
        theme="kawaii",
        type_label="9 Stickers Pack",
        required_images=["person"],
        display={"title": "Chibi Sticker Pack", "subtitle_field": "theme", "subtitle_default": "kawaii"},
    )


@pytest.fixture
def duo_style():
    return StyleConfig(
        id="que-paso-ayer-fiesta",
        name="What Happened Last Night?",
        prompt_template="A paparazzi photo of me and {celebrityName} at a party.",
        details_label="Additional details",
        default_details="Not specified",
        required_images=["person", "celebrity"],
        display={"title_field": "celebrityName", "title_default": "No celebrity", "subtitle": "Epic party"},
    )


@pytest.fixture
def catalog(single_style, duo_style):
    return StyleCatalog([single_style, duo_style])


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(tmp_path / "generated")


@pytest.fixture
def metadata_writer(tmp_path):
    return MetadataWriter(tmp_path / "content", tmp_path / "generated" / "metadata")


@pytest.fixture
def fake_generator(generated_png):
    """Return a mocked generator answering with an inline base64 image."""
    generator = Mock(spec=BaseGenerator)
    generator.name = "fake"
    generator.model = "test-model"
    generator.is_configured.return_value = True
    generator.get_missing_config.return_value = []
    generator.generate.return_value = GeneratorResult(
        b64_data=base64.b64encode(generated_png).decode("ascii"),
        model="test-model",
    )
    return generator


@pytest.fixture
def app_env(tmp_path, monkeypatch):
    """Point the application at temporary directories and test credentials."""
    from filterstudio.main import get_settings

    monkeypatch.setenv("IMAGE_API_KEY", TEST_API_KEY)
    monkeypatch.setenv("AUTH_PASSWORD", TEST_PASSWORD)
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "generated"))
    monkeypatch.setenv("CONTENT_DIR", str(tmp_path / "content"))
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


@pytest.fixture
def client(app_env, fake_generator):
    """TestClient with the image API replaced by a mock."""
    from fastapi.testclient import TestClient
    from filterstudio.main import app, get_generator_client

    app.dependency_overrides[get_generator_client] = lambda: fake_generator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client):
    """TestClient carrying a valid session cookie."""
    from filterstudio.auth import AUTH_COOKIE_NAME, session_token

    client.headers["Cookie"] = f"{AUTH_COOKIE_NAME}={session_token(TEST_PASSWORD)}"
    return client
