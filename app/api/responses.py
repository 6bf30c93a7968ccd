# app/api/responses.py
"""
Общие заголовки и ответы API.

Магазин (браузер) ходит к нам с другого домена, поэтому
КАЖДЫЙ ответ несёт CORS-заголовки, включая ошибки.
"""

from fastapi.responses import JSONResponse, PlainTextResponse

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "authorization, x-client-info, apikey, content-type, "
        "x-supabase-client-platform, x-supabase-client-platform-version, "
        "x-supabase-client-runtime, x-supabase-client-runtime-version"
    ),
}


def json_response(content: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


def error_response(message: str, status_code: int) -> JSONResponse:
    """{"error": "..."} + нужный статус."""
    return json_response({"error": message}, status_code=status_code)


def preflight_response() -> PlainTextResponse:
    return PlainTextResponse("ok", headers=CORS_HEADERS)


def method_not_allowed() -> JSONResponse:
    return error_response("Method not allowed", 405)
