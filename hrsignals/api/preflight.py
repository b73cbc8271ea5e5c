"""OPTIONS handling for function endpoints.

Browser preflights carrying Origin and Access-Control-Request-Method are
answered by PreflightCORSMiddleware; bare OPTIONS calls reach the router.
Both end in an empty 204.
"""

from fastapi import Response, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def preflight_response() -> Response:
    """Empty 204 with CORS headers."""
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)


class PreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose accepted preflights are an empty 204 instead of 200 "OK"."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != status.HTTP_200_OK:
            # Disallowed origin/method/header keeps Starlette's 400
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)
