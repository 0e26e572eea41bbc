import logging
import os
import threading

logger = logging.getLogger(__name__)

_library = None
_library_lock = threading.Lock()


class ModelLoadError(Exception):
    """The face recognition models could not be loaded."""


def load_models():
    """
    Load the detector, landmark and recognition models once per process.
    Returns the face_recognition module, which holds the loaded models.
    """
    global _library
    if _library is None:
        with _library_lock:
            if _library is None:
                logger.info("Loading face recognition models...")
                try:
                    import face_recognition
                except SystemExit as e:
                    # face_recognition calls quit() when face_recognition_models is missing
                    raise ModelLoadError(
                        "face_recognition_models is not installed"
                    ) from e
                except (ImportError, OSError, RuntimeError) as e:
                    raise ModelLoadError(str(e)) from e
                _library = face_recognition
                logger.info("Models loaded successfully")
    return _library


def models_dir() -> str:
    """Directory holding the model weight files."""
    try:
        import face_recognition_models
    except ImportError as e:
        raise ModelLoadError(str(e)) from e
    return os.path.dirname(face_recognition_models.face_recognition_model_location())
