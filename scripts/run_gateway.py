# scripts/run_gateway.py
import uvicorn

from object_gateway.common.config import settings
from object_gateway.gateway.api import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.GATEWAY_HOST, port=settings.GATEWAY_PORT)
