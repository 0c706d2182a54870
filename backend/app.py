"""
FLASK API SERVER
----------------
Serves as the backend API for the map viewer.

Exposes endpoints that:
- Describe the features visible in the current map extent with Gemini
- Return the features that fall inside an extent (no AI call)
- Report service health

This file does not do geometry or prompt logic directly.
it orchestrates the steps in src/pipeline.py
"""

import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from src.config import Config
from src.gemini import GeminiEmptyResponse, GeminiError, GeminiUnreachable
from src.pipeline import RequestError, describe_extent, prompt_for, validate_request

app = Flask(__name__)
app.config.from_object(Config)
CORS(app)

logging.basicConfig(
    level=app.config["LOG_LEVEL"],
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)


@app.route("/")
def index():
    return "Geospatial AI Assistant API is running!"


@app.route("/api/health")
def health():
    return jsonify(status="ok")


@app.post("/describe-extent")
def api_describe_extent():
    try:
        extent, geojson = validate_request(request.get_json(silent=True))
    except RequestError as e:
        return jsonify({"error": str(e)}), e.status_code

    if not app.config["GEMINI_API_KEY"]:
        log.error("GEMINI_API_KEY is not set")
        return jsonify({"error": "AI service is not configured: GEMINI_API_KEY is not set."}), 503

    try:
        result = describe_extent(extent, geojson, app.config)
    except GeminiUnreachable:
        return jsonify({"error": "Internal server error while communicating with AI service."}), 500
    except GeminiEmptyResponse:
        return jsonify({"error": "AI service error: No readable text found in AI response."}), 500
    except GeminiError as e:
        return jsonify({
            "error": "AI service error: Unable to get a response from Gemini API.",
            "details": e.details,
        }), e.status_code

    return jsonify(result)


@app.post("/api/features-in-extent")
def api_features_in_extent():
    # same filtering as /describe-extent, returned as GeoJSON for inspection
    try:
        extent, geojson = validate_request(request.get_json(silent=True))
    except RequestError as e:
        return jsonify({"error": str(e)}), e.status_code

    prompt, detected = prompt_for(extent, geojson)
    features = [{**f, "bbox": list(bbox)} for f, bbox in detected]

    return jsonify({
        "type": "FeatureCollection",
        "features": features,
        "extent": extent,
        "prompt": prompt,
    })


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=app.config["PORT"], debug=True)
