from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import (
    user,
    student,
    ride,
    driver,
    driver_verification,
    maintenance,
)
from app.src.enums import AppID


# ------------------------------------------------------
# Error envelopes shared by every app
# ------------------------------------------------------
async def httpErrorHandler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def requestErrorHandler(request: Request, exc: RequestValidationError):
    detail = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"success": False, "detail": detail},
        headers={"X-Error": "RequestValidationError"},
    )


def makeApp(title: str, app_id: AppID) -> FastAPI:
    app = FastAPI(title=title)
    app.state.id = app_id
    app.add_exception_handler(StarletteHTTPException, httpErrorHandler)
    app.add_exception_handler(RequestValidationError, requestErrorHandler)
    return app


# ------------------------------------------------------
# Create separate FastAPI apps for each user domain
# ------------------------------------------------------
app_user = makeApp("User APP", AppID.USER)
app_student = makeApp("Student APP", AppID.STUDENT)
app_driver = makeApp("Driver APP", AppID.DRIVER)
app_administration = makeApp("Administration APP", AppID.ADMINISTRATION)
app_maintenance = makeApp("Maintenance APP", AppID.MAINTENANCE)

mounted_apps = [
    app_user,
    app_student,
    app_driver,
    app_administration,
    app_maintenance,
]


# ------------------------------------------------------
# User routers
# ------------------------------------------------------
app_user.include_router(user.route_user)


# ------------------------------------------------------
# Student routers
# ------------------------------------------------------
app_student.include_router(student.route_student)
app_student.include_router(ride.route_student)


# ------------------------------------------------------
# Driver routers
# ------------------------------------------------------
app_driver.include_router(driver.route_driver)


# ------------------------------------------------------
# Administration routers
# ------------------------------------------------------
app_administration.include_router(driver_verification.route_administration)


# ------------------------------------------------------
# Maintenance routers
# ------------------------------------------------------
app_maintenance.include_router(maintenance.route_maintenance)
