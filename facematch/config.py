import os

SERVER_HOST = os.environ.get("HOST", "0.0.0.0")
SERVER_PORT = int(os.environ.get("PORT", "3000"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# face_recognition's own default tolerance
MATCH_THRESHOLD = 0.6

MAX_CONTENT_LENGTH = 50 * 1024 * 1024  # 50MB

REFERENCE_WORKERS = int(os.environ.get("REFERENCE_WORKERS", "8"))

# None leaves requests without a timeout
IMAGE_FETCH_TIMEOUT = (
    float(os.environ["IMAGE_FETCH_TIMEOUT"])
    if os.environ.get("IMAGE_FETCH_TIMEOUT")
    else None
)

# "large" uses the 68-point landmark predictor, "small" the 5-point one
LANDMARK_MODEL = os.environ.get("LANDMARK_MODEL", "large")
