from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.src import schemas
from app.src.constants import API_TITLE, API_VERSION
from app.api.controller import app_user, app_student, app_driver
from app.api.controller import app_administration, app_maintenance


app = FastAPI(title=API_TITLE, version=API_VERSION)

origins = ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/user", app_user, "User API")
app.mount("/student", app_student, "Student API")
app.mount("/driver", app_driver, "Driver API")
app.mount("/administration", app_administration, "Administration API")
app.mount("/maintenance", app_maintenance, "Maintenance API")


# Health check endpoint
@app.get("/health", tags=["Health Check"], response_model=schemas.HealthStatus)
async def health_check():
    return {"status": "OK", "version": API_VERSION}
