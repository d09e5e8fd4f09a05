from fastapi.responses import JSONResponse


def error_response(message: str, status_code: int = 400, details: list | None = None):
    content = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)
