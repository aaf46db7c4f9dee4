"""
AWS Lambda handler for the Consulting Engagement API.

This is the production entry point for AWS Lambda deployments.
For local development, use main.py (Flask app) instead.
"""

import base64
import binascii
import json
import logging
import os
import re

from engagement_engine import EngagementError, ValidationError, create_service
from engagement_engine.models import parse_money
from engagement_engine.output import OutputBuilder

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Environment (dev, staging, prod)
ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")

# Initialize service (reused across warm invocations)
service = create_service()
output = OutputBuilder()

# CORS headers for API Gateway
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,PATCH,OPTIONS",
}

ENGAGEMENT_PATH = re.compile(r"^/engagements/(?P<id>[^/]+)$")
TRANSITION_PATH = re.compile(r"^/engagements/(?P<id>[^/]+)/(?P<action>pause|resume|finalize|cancel)$")


def lambda_handler(event, context):
    """
    Main Lambda entry point.

    Handles API Gateway events for:
    - GET /health, GET /api
    - GET|POST /engagements, GET /engagements/stats, GET /engagements/consultants
    - GET|PATCH /engagements/{id}
    - POST /engagements/{id}/{pause|resume|finalize|cancel}
    - POST /commission
    - OPTIONS (CORS preflight)
    """
    # Handle CORS preflight
    http_method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    if http_method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS_HEADERS, "body": ""}

    # Get path (supports both REST API and HTTP API formats)
    path = event.get("path") or event.get("rawPath", "")

    if path == "/health" and http_method == "GET":
        return handle_health()
    if path == "/api" and http_method == "GET":
        return handle_api_info()

    try:
        return route(event, http_method, path)

    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return _response(400, {"error": f"Invalid JSON: {str(e)}", "status": "failed"})

    except (binascii.Error, UnicodeDecodeError) as e:
        logger.error(f"Body decode error: {str(e)}")
        return _response(400, {"error": "Request body is not valid base64-encoded UTF-8", "status": "failed"})

    except EngagementError as e:
        status_code, body = output.error(e)
        logger.error(f"{e.code}: {e.message}")
        return _response(status_code, body)

    except Exception as e:
        # Unexpected errors - log details but return generic message to avoid information disclosure
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        return _response(500, {"error": "An unexpected error occurred during processing", "status": "failed"})


def route(event, http_method, path):
    """Dispatch engagement routes. Engine errors propagate to lambda_handler."""
    query = event.get("queryStringParameters") or {}

    if path == "/engagements" and http_method == "GET":
        engagements = service.list_engagements(
            status=query.get("status"),
            consultant_id=query.get("consultant_id"),
            start_date=query.get("start_date"),
            end_date=query.get("end_date"),
        )
        return _response(200, [output.engagement(e, service.deadline_limit(e)) for e in engagements])

    if path == "/engagements" and http_method == "POST":
        return handle_register(event)

    if path == "/engagements/stats" and http_method == "GET":
        stats = service.stats(
            consultant_id=query.get("consultant_id"),
            start_date=query.get("start_date"),
            end_date=query.get("end_date"),
        )
        return _response(200, output.stats(stats))

    if path == "/engagements/consultants" and http_method == "GET":
        return _response(200, service.consultants())

    if path == "/commission" and http_method == "POST":
        body = _parse_body(event)
        result = service.preview_commission(body.get("value"), body.get("rating"), body.get("deadline_met"))
        return _response(200, output.commission(result, parse_money(body.get("value"))))

    match = TRANSITION_PATH.match(path)
    if match and http_method == "POST":
        return handle_transition(event, match.group("id"), match.group("action"))

    match = ENGAGEMENT_PATH.match(path)
    if match and http_method == "GET":
        return _engagement_response(service.get(match.group("id")))
    if match and http_method == "PATCH":
        return _engagement_response(service.revise(match.group("id"), _parse_body(event)))

    return _response(404, {"error": "Not found", "path": path})


def handle_health():
    """Health check endpoint."""
    return _response(200, {"status": "healthy", "environment": ENVIRONMENT})


def handle_api_info():
    """API information endpoint."""
    return _response(
        200,
        {
            "status": "ok",
            "message": "Consulting Engagement API",
            "version": "1.0",
            "environment": ENVIRONMENT,
            "runtime": "AWS Lambda",
            "endpoints": {
                "engagements": "/engagements [GET, POST]",
                "engagement": "/engagements/{id} [GET, PATCH]",
                "transitions": "/engagements/{id}/{pause|resume|finalize|cancel} [POST]",
                "stats": "/engagements/stats [GET]",
                "consultants": "/engagements/consultants [GET]",
                "commission": "/commission [POST]",
                "health": "/health [GET]",
            },
        },
    )


def handle_register(event):
    """Register a new consulting engagement."""
    input_data = _parse_body(event)
    if not input_data:
        return _response(400, {"error": "No input data provided", "status": "failed"})

    logger.info(f"Registering engagement for client: {input_data.get('client', 'Unknown')}")
    engagement = service.register(input_data)
    return _engagement_response(engagement, 201)


def handle_transition(event, engagement_id, action):
    """Apply a lifecycle transition to an engagement."""
    if action == "pause":
        engagement = service.pause(engagement_id)
    elif action == "resume":
        engagement = service.resume(engagement_id)
    elif action == "cancel":
        engagement = service.cancel(engagement_id)
    else:
        body = _parse_body(event)
        engagement = service.finalize(
            engagement_id,
            rating=body.get("rating"),
            signature_confirmed=body.get("signature_confirmed", False),
        )
    return _engagement_response(engagement)


def _parse_body(event) -> dict:
    body = event.get("body") or ""
    if isinstance(body, dict):
        return body
    if not body:
        return {}
    # Handle base64 encoded body (API Gateway)
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    data = json.loads(body)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _engagement_response(engagement, status_code=200):
    return _response(status_code, output.engagement(engagement, service.deadline_limit(engagement)))


def _response(status_code, body):
    return {"statusCode": status_code, "headers": CORS_HEADERS, "body": json.dumps(body)}
