import io
import logging
from typing import List, Optional

import numpy as np
import requests

from . import config, models

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "unknown"


class ImageFetchError(Exception):
    """The image URL answered with a non-successful HTTP status."""


def load_remote_image(url: str, timeout: Optional[float] = config.IMAGE_FETCH_TIMEOUT) -> np.ndarray:
    """Download an image and decode it into an RGB array."""
    try:
        response = requests.get(url, timeout=timeout)
        if not response.ok:
            raise ImageFetchError(f"Failed to fetch image: {response.reason}")
        face_recognition = models.load_models()
        return face_recognition.load_image_file(io.BytesIO(response.content))
    except Exception as e:
        logger.error(f"Error loading image {url}: {e}")
        raise


def detect_single_descriptor(image: np.ndarray) -> Optional[np.ndarray]:
    """Descriptor of the first face found in the image, None if there is no face."""
    face_recognition = models.load_models()
    face_locations = face_recognition.face_locations(image)
    if not face_locations:
        return None
    face_encodings = face_recognition.face_encodings(image, face_locations[:1], model=config.LANDMARK_MODEL)
    if not face_encodings:
        return None
    return face_encodings[0]


def detect_all_descriptors(image: np.ndarray) -> List[np.ndarray]:
    face_recognition = models.load_models()
    face_locations = face_recognition.face_locations(image)
    return face_recognition.face_encodings(image, face_locations, model=config.LANDMARK_MODEL)


class LabeledDescriptors:
    def __init__(self, label: str, descriptors: List[np.ndarray]):
        if not descriptors:
            raise ValueError(f"no descriptors given for label {label!r}")
        self.label = label
        self.descriptors = list(descriptors)

    def __repr__(self):
        return f"LabeledDescriptors(label={self.label!r}, descriptors={len(self.descriptors)})"


class FaceMatch:
    def __init__(self, label: str, distance: float):
        self.label = label
        self.distance = float(distance)

    def to_dict(self) -> dict:
        return {"label": self.label, "distance": self.distance}

    def __repr__(self):
        return f"FaceMatch(label={self.label!r}, distance={self.distance:.4f})"


class FaceMatcher:
    """
    Nearest-label matcher over a set of labeled descriptors.

    The distance to a label is the mean Euclidean distance between the query
    and that label's descriptors. The closest label wins when its distance is
    within the threshold; otherwise the face is reported as "unknown".
    """

    def __init__(self, labeled_descriptors: List[LabeledDescriptors], distance_threshold: float = config.MATCH_THRESHOLD):
        if not labeled_descriptors:
            raise ValueError("FaceMatcher needs at least one labeled descriptor")
        self.labeled_descriptors = list(labeled_descriptors)
        self.distance_threshold = distance_threshold

    def _mean_distance(self, descriptors: List[np.ndarray], query: np.ndarray) -> float:
        face_recognition = models.load_models()
        distances = face_recognition.face_distance(descriptors, query)
        return float(np.mean(distances))

    def find_best_match(self, descriptor: np.ndarray) -> FaceMatch:
        best = None
        for labeled in self.labeled_descriptors:
            distance = self._mean_distance(labeled.descriptors, descriptor)
            if best is None or distance < best.distance:
                best = FaceMatch(labeled.label, distance)
        if best.distance <= self.distance_threshold:
            return best
        return FaceMatch(UNKNOWN_LABEL, best.distance)

    def match_all(self, descriptors: List[np.ndarray]) -> List[FaceMatch]:
        return [self.find_best_match(d) for d in descriptors]
