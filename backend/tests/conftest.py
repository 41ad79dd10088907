"""Test fixtures — temporary file/cache trees, sample images and FastAPI test client."""

import io

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

from filedeck.main import create_app
from filedeck.services import init_services, shutdown_services
from filedeck.services.file_manager import FileManager
from filedeck.services.imaging import BlurHashEncoder, PillowCodec
from filedeck.utils.storage import LocalStorage


def make_image_bytes(size=(400, 200), color=(200, 30, 30), fmt="PNG", mode="RGB") -> bytes:
    """Encode a solid-colour image in memory."""
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def files_root(tmp_path):
    root = tmp_path / "media"
    root.mkdir()
    return root


@pytest.fixture
def cache_root(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def files(files_root):
    return LocalStorage(files_root)


@pytest.fixture
def cache(cache_root):
    return LocalStorage(cache_root, is_cache=True)


@pytest.fixture
def codec():
    return PillowCodec()


@pytest.fixture
def hasher():
    return BlurHashEncoder()


@pytest.fixture
def manager(files_root, cache_root):
    return FileManager(files_dir=str(files_root), cache_dir=str(cache_root))


@pytest_asyncio.fixture
async def client(files_root, cache_root):
    """Provide an async test client over temporary storage trees."""
    init_services(files_dir=str(files_root), cache_dir=str(cache_root))
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    shutdown_services()
