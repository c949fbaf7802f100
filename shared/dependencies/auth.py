import hmac

from fastapi import HTTPException, Request

API_KEY_HEADER = "X-API-Key"


async def verify_api_key(request: Request) -> None:
    """Route dependency rejecting callers without the shared key from APP_API_KEY.

    Raises:
        HTTPException: 401 when the X-API-Key header is absent or differs from the configured key.
    """
    expected = request.app.state.helper_config.get_string_val("APP_API_KEY")
    provided = request.headers.get(API_KEY_HEADER, "")
    if not provided or not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Invalid or missing API key.")
