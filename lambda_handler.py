"""
AWS Lambda handler for BackLine Settlement API.

This is the production entry point for AWS Lambda deployments.
For local development, use main.py (Flask app) instead.
"""

import base64
import json
import logging
import os

from settlement import SettlementProcessor

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Environment (dev, staging, prod)
ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")

# Initialize processor (reused across warm invocations)
processor = SettlementProcessor()

# CORS headers for API Gateway
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def lambda_handler(event, context):
    """
    Main Lambda entry point.

    Handles API Gateway events for:
    - GET /health
    - GET /api
    - POST /settle
    - POST /export
    - POST /cuts/validate
    - POST /finance_settings/validate
    - OPTIONS (CORS preflight)
    """
    # Handle CORS preflight
    http_method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    if http_method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS_HEADERS, "body": ""}

    # Get path (supports both REST API and HTTP API formats)
    path = event.get("path") or event.get("rawPath", "")

    # Route to appropriate handler
    if path == "/health" and http_method == "GET":
        return handle_health()
    elif path == "/api" and http_method == "GET":
        return handle_api_info()
    elif path == "/settle" and http_method == "POST":
        return handle_json_request(event, handle_settle)
    elif path == "/export" and http_method == "POST":
        return handle_json_request(event, handle_export)
    elif path == "/cuts/validate" and http_method == "POST":
        return handle_json_request(event, handle_validate_cuts)
    elif path == "/finance_settings/validate" and http_method == "POST":
        return handle_json_request(event, handle_validate_finance_settings)
    else:
        return {"statusCode": 404, "headers": CORS_HEADERS, "body": json.dumps({"error": "Not found", "path": path})}


def json_response(status_code, payload):
    return {"statusCode": status_code, "headers": CORS_HEADERS, "body": json.dumps(payload)}


def handle_health():
    """Health check endpoint."""
    return json_response(200, {"status": "healthy", "environment": ENVIRONMENT})


def handle_api_info():
    """API information endpoint."""
    return json_response(
        200,
        {
            "status": "ok",
            "message": "BackLine Settlement API",
            "version": "1.0",
            "environment": ENVIRONMENT,
            "runtime": "AWS Lambda",
            "endpoints": {
                "settle": "/settle [POST]",
                "export": "/export [POST]",
                "validate_cuts": "/cuts/validate [POST]",
                "validate_finance_settings": "/finance_settings/validate [POST]",
                "health": "/health [GET]",
            },
        },
    )


def parse_body(event):
    """Decode the request body into a dict. Returns None when the body is empty."""
    body = event.get("body", "")
    if not isinstance(body, str):
        return body
    if not body:
        return None
    # Handle base64 encoded body (API Gateway)
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return json.loads(body)


def handle_json_request(event, handler):
    """Parse the body, run the handler and map errors to HTTP responses."""
    try:
        input_data = parse_body(event)
        if not input_data:
            return json_response(400, {"error": "No input data provided", "status": "failed"})
        if not isinstance(input_data, dict):
            return json_response(400, {"error": "Request body must be a JSON object", "status": "failed"})

        return handler(input_data)

    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return json_response(400, {"error": f"Invalid JSON: {str(e)}", "status": "failed"})

    except (ValueError, KeyError, TypeError) as e:
        # Validation errors from engine (missing fields, invalid types, etc.)
        logger.error(f"Validation error: {str(e)}")
        return json_response(400, {"error": str(e), "status": "validation_failed"})

    except Exception as e:
        # Unexpected errors - log details but return generic message to avoid information disclosure
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        return json_response(500, {"error": "An unexpected error occurred during processing", "status": "failed"})


def handle_settle(input_data):
    """Settle a tour through the settlement engine."""
    tour_name = (input_data.get("tour") or {}).get("name", "Unknown")
    logger.info(f"Settling tour: {tour_name}")

    result = processor.process_from_dict(input_data)

    logger.info(f"Tour settled successfully: {tour_name}")
    return json_response(200, result)


def handle_export(input_data):
    """Render the tour finances workbook as a base64 body."""
    filename, content = processor.export_from_dict(input_data)
    logger.info(f"Exported tour finances: {filename}")

    headers = dict(CORS_HEADERS)
    headers["Content-Type"] = XLSX_MIMETYPE
    headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    headers["Cache-Control"] = "no-store"
    return {
        "statusCode": 200,
        "headers": headers,
        "isBase64Encoded": True,
        "body": base64.b64encode(content).decode("ascii"),
    }


def handle_validate_cuts(input_data):
    records = processor.prepare_cut_records(input_data)
    return json_response(200, {"status": "ok", "cuts": records})


def handle_validate_finance_settings(input_data):
    record = processor.prepare_finance_settings(input_data)
    return json_response(200, {"status": "ok", "finance_settings": record})
