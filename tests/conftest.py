import numpy as np
import pytest
import requests

from facematch import models
from facematch.server import create_app


def make_vector(*head):
    """128-d descriptor whose leading components are `head`, the rest zero."""
    v = np.zeros(128)
    v[: len(head)] = head
    return v


class FakeFaceLibrary:
    """Stands in for face_recognition: images are keyed by their raw content."""

    def __init__(self):
        self.faces = {}

    def add_image(self, key, descriptors):
        self.faces[key] = [np.asarray(d, dtype=np.float64) for d in descriptors]

    def load_image_file(self, file):
        data = file.read().decode("utf-8")
        if data not in self.faces:
            raise ValueError("cannot identify image file")
        return data

    def face_locations(self, image):
        return [(0, 10, 10, 0)] * len(self.faces[image])

    def face_encodings(self, image, known_face_locations=None, num_jitters=1, model="small"):
        faces = self.faces[image]
        if known_face_locations is None:
            return list(faces)
        return list(faces[: len(known_face_locations)])

    @staticmethod
    def face_distance(face_encodings, face_to_compare):
        if len(face_encodings) == 0:
            return np.empty(0)
        return np.linalg.norm(np.asarray(face_encodings) - face_to_compare, axis=1)


class FakeResponse:
    def __init__(self, status_code=200, reason="OK", content=b""):
        self.status_code = status_code
        self.reason = reason
        self.content = content

    @property
    def ok(self):
        return 200 <= self.status_code < 400


class FakeWeb:
    def __init__(self, library):
        self.library = library
        self.responses = {}
        self.requested = []

    def image(self, url, descriptors):
        """Serve an image at `url` containing the given face descriptors."""
        self.library.add_image(url, descriptors)
        self.responses[url] = FakeResponse(content=url.encode("utf-8"))

    def corrupt(self, url):
        self.responses[url] = FakeResponse(content=b"not an image")

    def status(self, url, status_code, reason):
        self.responses[url] = FakeResponse(status_code, reason)

    def get(self, url, timeout=None, **kwargs):
        self.requested.append((url, timeout))
        if url not in self.responses:
            raise requests.ConnectionError(f"Failed to establish a new connection: {url}")
        return self.responses[url]


@pytest.fixture
def vector():
    return make_vector


@pytest.fixture
def face_library(monkeypatch):
    library = FakeFaceLibrary()
    monkeypatch.setattr(models, "_library", library)
    return library


@pytest.fixture
def web(monkeypatch, face_library):
    fake = FakeWeb(face_library)
    monkeypatch.setattr(requests, "get", fake.get)
    return fake


@pytest.fixture
def app():
    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
