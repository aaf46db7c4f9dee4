from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from engagement_engine import EngagementError, ValidationError, create_service
from engagement_engine.models import parse_money
from engagement_engine.output import OutputBuilder
import os
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)

# Enable CORS for all routes (the dashboard front-end calls the API from the browser)
CORS(app)

# Initialize the engagement service from environment configuration
service = create_service()
output = OutputBuilder()


def _engagement_json(engagement, status_code=200):
    return jsonify(output.engagement(engagement, service.deadline_limit(engagement))), status_code


def _error_json(exc: EngagementError):
    status_code, body = output.error(exc)
    logger.error(f"{exc.code}: {exc.message}")
    return jsonify(body), status_code


@app.errorhandler(EngagementError)
def handle_engagement_error(exc):
    return _error_json(exc)


@app.errorhandler(Exception)
def handle_unexpected_error(exc):
    if isinstance(exc, HTTPException):
        return exc
    # Unexpected errors - log details but return a generic message
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
    return jsonify({
        "error": "An unexpected error occurred during processing",
        "status": "failed"
    }), 500


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Consulting Engagement API",
        "version": "1.0",
        "endpoints": {
            "engagements": "/engagements [GET, POST]",
            "engagement": "/engagements/<id> [GET, PATCH]",
            "transitions": "/engagements/<id>/<pause|resume|finalize|cancel> [POST]",
            "stats": "/engagements/stats [GET]",
            "consultants": "/engagements/consultants [GET]",
            "commission": "/commission [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


@app.route("/engagements", methods=["GET"])
def list_engagements():
    engagements = service.list_engagements(
        status=request.args.get("status"),
        consultant_id=request.args.get("consultant_id"),
        start_date=request.args.get("start_date"),
        end_date=request.args.get("end_date"),
    )
    return jsonify([output.engagement(e, service.deadline_limit(e)) for e in engagements]), 200


@app.route("/engagements", methods=["POST"])
def register_engagement():
    """Register a new consulting engagement"""
    input_data = request.get_json(silent=True)
    if not input_data or not isinstance(input_data, dict):
        return jsonify({
            "error": "No input data provided",
            "status": "failed"
        }), 400

    logger.info(f"Registering engagement for client: {input_data.get('client', 'Unknown')}")
    engagement = service.register(input_data)
    return _engagement_json(engagement, 201)


@app.route("/engagements/stats", methods=["GET"])
def engagement_stats():
    stats = service.stats(
        consultant_id=request.args.get("consultant_id"),
        start_date=request.args.get("start_date"),
        end_date=request.args.get("end_date"),
    )
    return jsonify(output.stats(stats)), 200


@app.route("/engagements/consultants", methods=["GET"])
def list_consultants():
    return jsonify(service.consultants()), 200


@app.route("/engagements/<engagement_id>", methods=["GET"])
def get_engagement(engagement_id):
    return _engagement_json(service.get(engagement_id))


@app.route("/engagements/<engagement_id>", methods=["PATCH"])
def revise_engagement(engagement_id):
    return _engagement_json(service.revise(engagement_id, _json_body()))


@app.route("/engagements/<engagement_id>/pause", methods=["POST"])
def pause_engagement(engagement_id):
    return _engagement_json(service.pause(engagement_id))


@app.route("/engagements/<engagement_id>/resume", methods=["POST"])
def resume_engagement(engagement_id):
    return _engagement_json(service.resume(engagement_id))


@app.route("/engagements/<engagement_id>/finalize", methods=["POST"])
def finalize_engagement(engagement_id):
    body = _json_body()
    engagement = service.finalize(
        engagement_id,
        rating=body.get("rating"),
        signature_confirmed=body.get("signature_confirmed", False),
    )
    return _engagement_json(engagement)


@app.route("/engagements/<engagement_id>/cancel", methods=["POST"])
def cancel_engagement(engagement_id):
    return _engagement_json(service.cancel(engagement_id))


@app.route("/commission", methods=["POST"])
def preview_commission():
    """Preview the commission for a value, rating and deadline outcome"""
    body = _json_body()
    result = service.preview_commission(
        body.get("value"),
        body.get("rating"),
        body.get("deadline_met"),
    )
    return jsonify(output.commission(result, parse_money(body.get("value")))), 200


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
