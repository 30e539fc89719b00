#!/usr/bin/env python3
"""
App Factory Web Interface
FastAPI server behind the faux IDE: project editor (studio), build center and
a WebSocket feed for API logs and build progress.
"""

import asyncio
import os
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect, BackgroundTasks
from fastapi.responses import FileResponse
from pydantic import BaseModel

from app_factory import __version__
from app_factory.lib.build_center import BuildCenter, DEFAULT_DELAY_RANGE
from app_factory.lib.errors import ProjectNotFoundError, BuildInProgressError, UnknownTargetError
from app_factory.lib.event_logger import get_event_logger
from app_factory.lib.llm_client import FactoryLLMClient
from app_factory.lib.models import BUILD_TARGETS, DeviceMode, Project, get_build_target
from app_factory.lib.project_store import ProjectStore
from app_factory.lib.studio import Studio

# Load environment variables
load_dotenv()

STATIC_DIR = Path(__file__).parent / "static"

app = FastAPI(title="App Factory", description="AI app factory: generate, inspect and build apps",
              version=__version__)


# Pydantic models for API requests
class CreateProjectRequest(BaseModel):
    name: str


class RenameProjectRequest(BaseModel):
    name: str


class GenerateRequest(BaseModel):
    prompt: str


class ActionRequest(BaseModel):
    path: Optional[str] = None


class StudioUpdateRequest(BaseModel):
    tab: Optional[str] = None
    device: Optional[DeviceMode] = None
    active_file: Optional[str] = None


class BuildRequest(BaseModel):
    target: str


# Global state
factory_client: Optional[FactoryLLMClient] = None
project_store = ProjectStore()
studios: Dict[str, Studio] = {}
build_centers: Dict[str, BuildCenter] = {}
connected_websockets: List[WebSocket] = []


def _delay_range_from_env():
    raw = os.getenv("APP_FACTORY_BUILD_DELAY")
    if not raw:
        return DEFAULT_DELAY_RANGE
    low, _, high = raw.partition(",")
    try:
        return float(low), float(high or low)
    except ValueError:
        print(f"⚠️ Ignoring malformed APP_FACTORY_BUILD_DELAY={raw!r}, using {DEFAULT_DELAY_RANGE}")
        return DEFAULT_DELAY_RANGE


build_delay_range = _delay_range_from_env()


def get_factory_client() -> FactoryLLMClient:
    """Get or create the LLM client instance."""
    global factory_client
    if factory_client is None:
        try:
            factory_client = FactoryLLMClient()
        except Exception as e:
            print(f"Error initializing FactoryLLMClient: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to initialize LLM client: {str(e)}")
    return factory_client


def get_project(project_id: str) -> Project:
    try:
        return project_store.get_project(project_id)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def get_studio(project_id: str) -> Studio:
    """Get or create the editor state for a project."""
    get_project(project_id)
    if project_id not in studios:
        studios[project_id] = Studio(project_id, project_store, get_factory_client())
    return studios[project_id]


def get_build_center(project_id: str) -> BuildCenter:
    """Get or create the build center for a project."""
    get_project(project_id)
    if project_id not in build_centers:
        center = BuildCenter(get_factory_client(), delay_range=build_delay_range)

        async def forward(event: str, payload: Dict):
            await broadcast_message({"type": event, "project_id": project_id, **payload})

        center.add_listener(forward)
        build_centers[project_id] = center
    return build_centers[project_id]


async def broadcast_message(message: Dict):
    """Broadcast message to all connected WebSocket clients."""
    message.setdefault("timestamp", datetime.now().isoformat())
    for websocket in connected_websockets.copy():
        try:
            await websocket.send_json(message)
        except Exception:
            if websocket in connected_websockets:
                connected_websockets.remove(websocket)


async def broadcast_studio(studio: Studio, project_changed: bool = False):
    await broadcast_message({
        "type": "studio_log",
        "project_id": studio.project_id,
        "logs": list(studio.agent_logs)
    })
    if project_changed:
        await broadcast_message({
            "type": "project_updated",
            "project_id": studio.project_id,
            "project": studio.project.to_dict()
        })


@app.get("/")
async def read_root():
    """Serve the main web interface."""
    return FileResponse(STATIC_DIR / "index.html")


@app.get("/api/health")
async def health():
    client = get_factory_client()
    return {
        "status": "ok",
        "version": __version__,
        "providers": [p["name"] for p in client.available_providers]
    }


@app.get("/api/projects")
async def list_projects():
    return {"projects": [p.to_dict() for p in project_store.list_projects()]}


@app.post("/api/projects", status_code=201)
async def create_project(request: CreateProjectRequest):
    project = project_store.create_project(request.name)
    return project.to_dict()


@app.get("/api/projects/{project_id}")
async def read_project(project_id: str):
    return get_project(project_id).to_dict()


@app.patch("/api/projects/{project_id}")
async def rename_project(project_id: str, request: RenameProjectRequest):
    get_project(project_id)
    if not request.name.strip():
        raise HTTPException(status_code=400, detail="Project name is empty")
    project = project_store.rename_project(project_id, request.name.strip())
    return project.to_dict()


@app.delete("/api/projects/{project_id}")
async def delete_project(project_id: str):
    center = build_centers.get(project_id)
    if center and center.is_building:
        raise HTTPException(status_code=409, detail="Cannot delete a project while it is building")
    try:
        project_store.delete_project(project_id)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    studios.pop(project_id, None)
    build_centers.pop(project_id, None)
    return {"success": True}


@app.get("/api/projects/{project_id}/studio")
async def read_studio(project_id: str):
    return get_studio(project_id).to_dict()


@app.patch("/api/projects/{project_id}/studio")
async def update_studio(project_id: str, request: StudioUpdateRequest):
    studio = get_studio(project_id)
    try:
        if request.tab is not None:
            studio.set_tab(request.tab)
        if request.device is not None:
            studio.set_device(request.device)
        if request.active_file is not None:
            studio.select_file(request.active_file)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except KeyError:
        raise HTTPException(status_code=404, detail=f"File '{request.active_file}' not found")
    return studio.to_dict()


@app.post("/api/projects/{project_id}/generate")
async def generate_project(project_id: str, request: GenerateRequest):
    """Ask the architect for a new blueprint and replace the project's files."""
    studio = get_studio(project_id)
    if studio.is_generating:
        raise HTTPException(status_code=409, detail="The architect is already working on this project")
    if not request.prompt.strip():
        return {"success": False, "studio": studio.to_dict()}

    # Claimed before the first await so a second request sees the 409
    studio.is_generating = True
    try:
        await broadcast_message({
            "type": "system",
            "project_id": project_id,
            "message": f"🏗️ Generating: {request.prompt[:80]}"
        })
        success = await asyncio.to_thread(studio.generate, request.prompt)
    finally:
        studio.is_generating = False
    await broadcast_studio(studio, project_changed=success)

    if not success:
        raise HTTPException(status_code=502, detail="500 ERROR: API connection lost.")
    return {"success": True, "studio": studio.to_dict(), "project": studio.project.to_dict()}


async def _run_ai_action(project_id: str, action: str, request: ActionRequest):
    studio = get_studio(project_id)
    if studio.is_generating:
        raise HTTPException(status_code=409, detail="The architect is already working on this project")
    if request.path:
        try:
            studio.select_file(request.path)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"File '{request.path}' not found")
    if not studio.active_file or studio.project.get_file(studio.active_file) is None:
        raise HTTPException(status_code=400, detail="No active file")

    studio.is_generating = True
    try:
        result = await asyncio.to_thread(studio.ai_action, action)
    finally:
        studio.is_generating = False
    await broadcast_studio(studio, project_changed=(action == "refactor" and result is not None))

    if result is None:
        raise HTTPException(status_code=502, detail="Action failed.")
    return result, studio


@app.post("/api/projects/{project_id}/explain")
async def explain_file(project_id: str, request: ActionRequest):
    explanation, studio = await _run_ai_action(project_id, "explain", request)
    return {"success": True, "path": studio.active_file, "explanation": explanation,
            "studio": studio.to_dict()}


@app.post("/api/projects/{project_id}/refactor")
async def refactor_file(project_id: str, request: ActionRequest):
    content, studio = await _run_ai_action(project_id, "refactor", request)
    return {"success": True, "path": studio.active_file, "content": content,
            "studio": studio.to_dict()}


@app.get("/api/build/targets")
async def list_build_targets():
    return {"targets": [t.to_dict() for t in BUILD_TARGETS]}


async def run_build(center: BuildCenter, project: Project, target: str):
    try:
        await center.start_build(project, target)
    except BuildInProgressError as e:
        await broadcast_message({"type": "error", "project_id": project.id, "message": str(e)})


@app.post("/api/projects/{project_id}/build", status_code=202)
async def start_build(project_id: str, request: BuildRequest, background_tasks: BackgroundTasks):
    """Start the simulated pipeline; progress arrives over the WebSocket."""
    project = get_project(project_id)
    try:
        get_build_target(request.target)
    except UnknownTargetError as e:
        raise HTTPException(status_code=400, detail=str(e))

    center = get_build_center(project_id)
    if center.is_building:
        raise HTTPException(status_code=409, detail="Compiler Busy")

    background_tasks.add_task(run_build, center, project, request.target)
    return {"success": True, "target": request.target, "status": center.status()}


@app.get("/api/projects/{project_id}/build")
async def read_build_status(project_id: str):
    return get_build_center(project_id).status()


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for studio logs and build progress."""
    await websocket.accept()
    connected_websockets.append(websocket)

    await websocket.send_json({
        "type": "system",
        "message": "🎯 Connected to App Factory",
        "timestamp": datetime.now().isoformat()
    })

    try:
        while True:
            # Clients only listen; keep the socket open until they leave
            await websocket.receive_text()
    except WebSocketDisconnect:
        if websocket in connected_websockets:
            connected_websockets.remove(websocket)


def run_server(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False):
    host = host or os.getenv("APP_FACTORY_HOST", "0.0.0.0")
    port = port or int(os.getenv("APP_FACTORY_PORT", "8000"))
    get_event_logger().log_info("SERVER STARTED", {"host": host, "port": port})
    print("🚀 Starting App Factory Web Interface...")
    print(f"🌐 Access the web interface at: http://localhost:{port}")
    uvicorn.run("app_factory.webapp.web_interface:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run_server()
