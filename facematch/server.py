import logging
from typing import Any, Optional

from flask import Flask, jsonify, request, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, NotFound

from . import config, face, models
from .dataset import load_labeled_descriptors

logging.basicConfig(
    level=config.LOG_LEVEL, format="[%(asctime)s] %(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def error_response(error: str, http_code: int, message: Optional[str] = None, **extra: Any):
    resp = {"error": error}
    if message is not None:
        resp["message"] = message
    resp.update(extra)
    return jsonify(resp), http_code


def create_app() -> Flask:
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_CONTENT_LENGTH
    app.json.sort_keys = False
    CORS(app)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return error_response(e.name, e.code, e.description)

    @app.errorhandler(Exception)
    def handle_exception(e: Exception):
        logger.exception(f"Unhandled exception: {e}")
        return error_response("Internal server error", 500, str(e))

    @app.route("/models/<path:filename>", methods=["GET"])
    def model_file(filename: str):
        try:
            directory = models.models_dir()
        except models.ModelLoadError as e:
            raise NotFound(f"Model directory unavailable: {e}") from e
        return send_from_directory(directory, filename)

    @app.route("/", methods=["POST"])
    def match_group():
        logger.info("Received request")
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = {}
        dataset = payload.get("dataset")
        group_img = payload.get("group_img")

        if not isinstance(dataset, list):
            return error_response("Invalid dataset format", 400, received=dataset)
        if not group_img:
            return error_response("Missing group_img", 400)

        try:
            models.load_models()
        except models.ModelLoadError as e:
            logger.error(f"Error loading models: {e}")
            return error_response("Failed to load face recognition models", 500, str(e))

        labeled_descriptors = load_labeled_descriptors(dataset)
        if not labeled_descriptors:
            return error_response(
                "No valid face descriptors could be generated from the dataset", 400
            )
        logger.info(f"Processed {len(labeled_descriptors)} individual faces")

        matcher = face.FaceMatcher(labeled_descriptors, config.MATCH_THRESHOLD)

        logger.info("Processing group image...")
        try:
            image = face.load_remote_image(group_img)
            descriptors = face.detect_all_descriptors(image)
            logger.info(f"Detected {len(descriptors)} faces in group image")
            matches = matcher.match_all(descriptors)
        except Exception as e:
            logger.error(f"Error processing group image: {e}")
            return error_response("Failed to process group image", 500, str(e))

        return jsonify({"success": True, "matches": [m.to_dict() for m in matches]})

    return app


app = create_app()


def main():
    try:
        models.load_models()
    except models.ModelLoadError as e:
        logger.warning(f"Models not loaded at startup: {e}")
    try:
        logger.info(f"Models directory: {models.models_dir()}")
    except models.ModelLoadError as e:
        logger.warning(f"Models directory unavailable: {e}")
    logger.info(f"Server running on port {config.SERVER_PORT}")
    app.run(host=config.SERVER_HOST, port=config.SERVER_PORT, debug=False, threaded=True)


if __name__ == "__main__":
    main()
