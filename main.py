#!/usr/bin/env python
import traceback
import uuid
from contextlib import asynccontextmanager
from datetime import datetime

import certifi
from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient

from config import settings
from exceptions import ClubException
from logging_config import logger
from routers.root import router as root_router
from routers.statistics import router as statistics_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting club statistics API server...")
    logger.info(f"Connecting to MongoDB: {settings.DB_NAME}")
    app.state.client = AsyncIOMotorClient(settings.DB_URL, tlsCAFile=certifi.where())
    app.state.mongodb = app.state.client[settings.DB_NAME]
    logger.info("MongoDB connection established")

    yield

    # Shutdown
    logger.info("Shutting down club statistics API server...")
    app.state.client.close()
    logger.info("MongoDB connection closed")


app = FastAPI(
    lifespan=lifespan,
    title="Club Statistics API",
    version="1.0.0",
    description="""
## Cricket Club Statistics API

Availability and selection statistics for club players, teams and seasons.

### Key Features

* **Player Statistics** - Per-season team and club-wide availability/selection rates plus career totals
* **Team Statistics** - Per-season team summaries with average player rates
* **Season Statistics** - Season-wide roll-up across all teams
* **Advanced Statistics** - Player of the match, umpire fees, win/loss, duties, playing time and availability alerts

### Authentication

All endpoints require an admin access token in the Authorization header:

```
Authorization: Bearer <your_access_token>
```

### Error Handling

All errors return a standardized format with correlation IDs for debugging:

```json
{
  "error": {
    "message": "Resource not found",
    "status_code": 404,
    "correlation_id": "uuid",
    "timestamp": "ISO-8601",
    "path": "/api/endpoint"
  }
}
```
    """,
    license_info={
        "name": "Proprietary",
    },
    openapi_tags=[
        {
            "name": "statistics",
            "description": "Recalculation and retrieval of player, team and season statistics",
        },
    ],
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception Handlers
@app.exception_handler(ClubException)
async def club_exception_handler(request: Request, exc: ClubException):
    """Handle all custom club exceptions"""
    correlation_id = str(uuid.uuid4())

    error_response = {
        "error": {
            "message": exc.message,
            "status_code": exc.status_code,
            "correlation_id": correlation_id,
            "timestamp": datetime.utcnow().isoformat(),
            "path": request.url.path,
            "details": exc.details,
        }
    }

    logger.error(
        f"[{correlation_id}] {exc.__class__.__name__}: {exc.message}",
        extra={
            "correlation_id": correlation_id,
            "status_code": exc.status_code,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    return JSONResponse(status_code=exc.status_code, content=error_response)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle FastAPI HTTPExceptions with consistent format"""
    correlation_id = str(uuid.uuid4())

    error_response = {
        "error": {
            "message": exc.detail,
            "status_code": exc.status_code,
            "correlation_id": correlation_id,
            "timestamp": datetime.utcnow().isoformat(),
            "path": request.url.path,
        }
    }

    logger.error(
        f"[{correlation_id}] HTTPException: {exc.detail}",
        extra={
            "correlation_id": correlation_id,
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )

    return JSONResponse(status_code=exc.status_code, content=error_response)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected exceptions"""
    correlation_id = str(uuid.uuid4())

    logger.error(
        f"[{correlation_id}] Unhandled exception: {str(exc)}",
        extra={
            "correlation_id": correlation_id,
            "path": request.url.path,
            "traceback": traceback.format_exc(),
        },
    )

    error_response = {
        "error": {
            "message": "An unexpected error occurred",
            "status_code": 500,
            "correlation_id": correlation_id,
            "timestamp": datetime.utcnow().isoformat(),
            "path": request.url.path,
        }
    }

    return JSONResponse(status_code=500, content=error_response)


app.include_router(root_router, prefix="", tags=["root"])
app.include_router(statistics_router, prefix="/statistics", tags=["statistics"])
