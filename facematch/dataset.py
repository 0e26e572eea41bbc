import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Optional

from . import config, face

logger = logging.getLogger(__name__)


def label_text(value: Any) -> str:
    """Render an id the way it reads in JSON: true, 1 for 1.0, strings unquoted."""
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return json.dumps(value, separators=(",", ":"))


def _process_entry(entry: Any) -> Optional[face.LabeledDescriptors]:
    """Labeled descriptor for one reference entry, None when the entry is unusable."""
    if not isinstance(entry, dict) or not entry.get("id") or not entry.get("imglink"):
        logger.error(f"Invalid data entry: {entry!r}")
        return None

    entry_id = entry["id"]
    try:
        logger.info(f"Processing image for id {entry_id}")
        image = face.load_remote_image(entry["imglink"])
        descriptor = face.detect_single_descriptor(image)
    except Exception as e:
        logger.error(f"Error processing image {entry_id}: {e}")
        return None

    if descriptor is None:
        logger.warning(f"No face detected in image for id: {entry_id}")
        return None
    return face.LabeledDescriptors(label_text(entry_id), [descriptor])


def load_labeled_descriptors(
    dataset: List[Any], max_workers: int = config.REFERENCE_WORKERS
) -> List[face.LabeledDescriptors]:
    """
    Build labeled descriptors for every usable reference entry.

    Entries are processed concurrently; a failing entry is dropped without
    affecting the others.
    """
    logger.info(f"Processing {len(dataset)} images from dataset")
    if not dataset:
        return []

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(dataset)))) as executor:
        results = list(executor.map(_process_entry, dataset))

    valid = [r for r in results if r is not None]
    logger.info(f"Generated {len(valid)} valid descriptors")
    return valid
