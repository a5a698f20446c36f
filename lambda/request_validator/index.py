#!/usr/bin/env python3
"""
Request validator invoked through the API Gateway proxy integration.
Checks that the request body, when present, is a JSON object and echoes the
outcome back to the caller.
"""

import json
import logging
import os
from typing import Any, Dict

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO'))


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body)
    }


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for proxy requests.

    Args:
        event: API Gateway proxy event
        context: Lambda context

    Returns:
        API Gateway proxy response
    """
    method = event.get('httpMethod')
    path = event.get('path')
    logger.info(f"Request: {method} {path}")

    body = event.get('body')
    if not body:
        return _response(200, {'valid': True})

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        logger.info(f"Rejected request with malformed JSON: {e}")
        return _response(400, {'valid': False, 'error': 'Body is not valid JSON'})

    if not isinstance(payload, dict):
        logger.info("Rejected request with non-object body")
        return _response(400, {'valid': False, 'error': 'Body must be a JSON object'})

    return _response(200, {'valid': True, 'fields': sorted(payload)})
