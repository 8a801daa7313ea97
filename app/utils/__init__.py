"""
Utilities package
"""

from .retry import retry_with_backoff, exponential_backoff, linear_backoff
from .gemini import call_gemini, parse_generate_content_response, extract_json_from_response

__all__ = [
    'retry_with_backoff',
    'exponential_backoff',
    'linear_backoff',
    'call_gemini',
    'parse_generate_content_response',
    'extract_json_from_response',
]
