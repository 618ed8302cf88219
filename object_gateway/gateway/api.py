# object_gateway/gateway/api.py
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from object_gateway.common.config import Settings, settings as default_settings
from object_gateway.common.exceptions import (
    DirectoryUnavailableError,
    GatewayError,
    NoAvailableNodesError,
    NodeUnreachableError,
    ObjectNotFoundError,
)
from object_gateway.common.interfaces import IStorage
from object_gateway.common.utils import MAX_OBJECT_ID_LENGTH, validate_object_id
from object_gateway.models.schemas import MessageResponse, NodesResponse

from .coordinator import build_storage, configure_logging

logger = logging.getLogger(__name__)

INVALID_ID_MESSAGE = f"provide objectID of length [1,{MAX_OBJECT_ID_LENGTH}]"


def status_for(error: GatewayError) -> int:
    if isinstance(error, ObjectNotFoundError):
        return 404
    if isinstance(error, (NoAvailableNodesError, DirectoryUnavailableError)):
        return 503
    if isinstance(error, NodeUnreachableError):
        return 502
    return 500


def message(status_code: int, text: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=MessageResponse(message=text).model_dump()
    )


def get_storage(request: Request) -> IStorage:
    """FastAPI dependency to get the storage instance"""
    return request.app.state.storage


def create_app(
    storage: Optional[IStorage] = None, settings: Optional[Settings] = None
) -> FastAPI:
    settings = settings or default_settings
    if storage is None:
        configure_logging(settings.DEBUG)
        storage = build_storage(settings)
    timeout = settings.REQUEST_TIMEOUT

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for FastAPI app"""
        if settings.SETUP_ON_STARTUP:
            try:
                await asyncio.wait_for(app.state.storage.setup(), timeout)
                logger.info("All storage workers are set up")
            except (GatewayError, asyncio.TimeoutError) as e:
                logger.error(f"Startup setup failed: {str(e)}")
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.storage = storage

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    @app.put("/object/{object_id}")
    async def put_object(
        object_id: str, request: Request, storage: IStorage = Depends(get_storage)
    ):
        if not validate_object_id(object_id):
            return message(400, INVALID_ID_MESSAGE)

        content_type = request.headers.get("content-type", "")
        body = await request.body()
        try:
            await asyncio.wait_for(storage.put(object_id, content_type, body), timeout)
        except asyncio.TimeoutError:
            logger.error(f"cannot put object '{object_id}': timed out after {timeout}s")
            return message(504, f"cannot put object '{object_id}'")
        except GatewayError as e:
            logger.error(f"cannot put object, err: {str(e)}")
            return message(status_for(e), f"cannot put object '{object_id}'")

        return message(200, f"object '{object_id}' was successfully put")

    @app.get("/object/{object_id}")
    async def get_object(object_id: str, storage: IStorage = Depends(get_storage)):
        if not validate_object_id(object_id):
            return message(400, INVALID_ID_MESSAGE)

        try:
            body, content_type = await asyncio.wait_for(storage.get(object_id), timeout)
        except asyncio.TimeoutError:
            logger.error(f"cannot get object '{object_id}': timed out after {timeout}s")
            return message(504, f"cannot get object '{object_id}'")
        except GatewayError as e:
            logger.error(f"cannot get object, err: {str(e)}")
            return message(status_for(e), f"cannot get object '{object_id}'")

        # Explicit header keeps the stored content type verbatim
        return Response(content=body, headers={"content-type": content_type})

    @app.post("/setup")
    async def setup(storage: IStorage = Depends(get_storage)):
        try:
            await asyncio.wait_for(storage.setup(), timeout)
        except asyncio.TimeoutError:
            logger.error(f"Setup timed out after {timeout}s")
            return message(504, "cannot set up storage workers")
        except GatewayError as e:
            logger.error(f"Setup failed: {str(e)}")
            return message(status_for(e), "cannot set up storage workers")
        return message(200, "storage workers are set up")

    @app.get("/nodes")
    async def get_active_nodes(storage: IStorage = Depends(get_storage)):
        """Get information about discovered storage nodes"""
        describe = getattr(storage, "describe_nodes", None)
        if describe is None:
            return message(501, "node listing is not supported by this storage")
        try:
            nodes = await asyncio.wait_for(describe(), timeout)
        except asyncio.TimeoutError:
            return message(504, "cannot list storage nodes")
        except GatewayError as e:
            logger.error(f"Failed to get active nodes: {str(e)}")
            return message(status_for(e), "cannot list storage nodes")
        return NodesResponse(active_nodes_count=len(nodes), active_nodes=nodes)

    return app


app = create_app()
