from fastapi.responses import JSONResponse


def error_response(message="An error occurred", status=400, **extra):
    return JSONResponse(
        status_code=status,
        content={"error": message, **extra},
    )


def success_response(**content):
    return JSONResponse(
        status_code=200,
        content={"success": True, **content},
    )
