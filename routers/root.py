from fastapi import APIRouter

router = APIRouter()
endpoints = [
    {
        "name": "Statistics",
        "url": "/statistics"
    },
]

@router.get("/", response_description="List all entry API endpoints")
async def get_root():
    return endpoints
