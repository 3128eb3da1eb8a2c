from flask import Flask, request, jsonify, make_response
from flask_cors import CORS
from settlement import SettlementProcessor
import json
import os
import logging

# Configure logging
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

app = Flask(__name__)

# Enable CORS for all routes so the BackLine web client can call the API
CORS(app)

# Initialize the settlement processor
processor = SettlementProcessor()


def _tour_name(input_data):
    return (input_data.get('tour') or {}).get('name', 'Unknown')


def _failed(message):
    return jsonify({
        "error": message,
        "status": "failed"
    }), 400


def _validation_error(e):
    logger.error(f"Validation error: {str(e)}")
    return jsonify({
        "error": str(e),
        "status": "validation_failed"
    }), 400


def _unexpected_error(e):
    logger.error(f"Processing error: {str(e)}", exc_info=True)
    return jsonify({
        "error": "An unexpected error occurred during processing",
        "status": "failed"
    }), 500


def _read_payload():
    """
    Parse the request body as a JSON object.

    Returns (input_data, None) on success, or (None, error_response).
    """
    body = request.get_data(as_text=True)
    if not body.strip():
        return None, _failed("No input data provided")

    try:
        input_data = json.loads(body)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return None, _failed(f"Invalid JSON: {str(e)}")

    if not input_data:
        return None, _failed("No input data provided")
    if not isinstance(input_data, dict):
        return None, _failed("Request body must be a JSON object")
    return input_data, None


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "BackLine Settlement API",
        "version": "1.0",
        "environment": ENVIRONMENT,
        "endpoints": {
            "settle": "/settle [POST]",
            "export": "/export [POST]",
            "validate_cuts": "/cuts/validate [POST]",
            "validate_finance_settings": "/finance_settings/validate [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy", "environment": ENVIRONMENT}), 200


@app.route("/settle", methods=["POST"])
def settle():
    """
    Settle a tour: fees, savings withholding and member payouts
    """
    input_data, error = _read_payload()
    if error:
        return error

    try:
        tour_name = _tour_name(input_data)
        logger.info(f"Settling tour: {tour_name}")

        result = processor.process_from_dict(input_data)

        logger.info(f"Tour settled successfully: {tour_name}")
        return jsonify(result), 200

    except (ValueError, KeyError, TypeError) as e:
        return _validation_error(e)

    except Exception as e:
        return _unexpected_error(e)


@app.route("/export", methods=["POST"])
def export():
    """
    Settle a tour and download the finances as an xlsx workbook
    """
    input_data, error = _read_payload()
    if error:
        return error

    try:
        tour_name = _tour_name(input_data)
        logger.info(f"Exporting tour finances: {tour_name}")

        filename, content = processor.export_from_dict(input_data)

        response = make_response(content)
        response.headers['Content-Type'] = XLSX_MIMETYPE
        response.headers['Content-Disposition'] = f'attachment; filename="{filename}"'
        response.headers['Cache-Control'] = 'no-store'
        return response

    except (ValueError, KeyError, TypeError) as e:
        return _validation_error(e)

    except Exception as e:
        return _unexpected_error(e)


@app.route("/cuts/validate", methods=["POST"])
def validate_cuts():
    """Check edited cuts and return the rows to save"""
    input_data, error = _read_payload()
    if error:
        return error

    try:
        records = processor.prepare_cut_records(input_data)
        return jsonify({"status": "ok", "cuts": records}), 200

    except (ValueError, KeyError, TypeError) as e:
        return _validation_error(e)

    except Exception as e:
        return _unexpected_error(e)


@app.route("/finance_settings/validate", methods=["POST"])
def validate_finance_settings():
    """Check edited band finance settings and return the row to save"""
    input_data, error = _read_payload()
    if error:
        return error

    try:
        record = processor.prepare_finance_settings(input_data)
        return jsonify({"status": "ok", "finance_settings": record}), 200

    except (ValueError, KeyError, TypeError) as e:
        return _validation_error(e)

    except Exception as e:
        return _unexpected_error(e)


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
