"""
Scene Layout API - FastAPI Application

Stateless HTTP adapter over the layout engine. It provides:
- Scene validation with field-addressed diagnostics
- Scene -> graph conversion with seeded positions
- Layout with any strategy (force, grid, circular, smart)
- CORS configuration for a local editor frontend

Nothing is stored between requests; every call builds its graph fresh.
"""
import logging
import os
from typing import Any, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from .layout import LayoutStrategy
from .models import CanvasConfig, LayoutConfig, NodePosition, Scene
from .pipeline import layout_scene
from .transform import scene_to_graph
from .validation import validate_scene, validation_summary

logger = logging.getLogger(__name__)

DEFAULT_HOST = os.environ.get("SCENE_LAYOUT_HOST", "127.0.0.1")
DEFAULT_PORT = int(os.environ.get("SCENE_LAYOUT_PORT", "8765"))


# --- FastAPI App ---

app = FastAPI(
    title="Scene Layout API",
    description="Validation and node layout for scene graph editors",
    version="1.0.0",
)

# CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Request Models ---

class GraphRequest(BaseModel):
    scene: dict[str, Any]
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    positions: Optional[dict[str, NodePosition]] = None
    auto_layout: bool = False


class LayoutRequest(BaseModel):
    scene: dict[str, Any]
    strategy: str = LayoutStrategy.SMART.value  # force, grid, circular, smart
    config: Optional[dict[str, Any]] = None
    positions: Optional[dict[str, NodePosition]] = None
    fixed: list[str] = Field(default_factory=list)


def _reject_invalid(scene: dict):
    """Raise 422 with the diagnostic list if the scene has errors."""
    result = validate_scene(scene)
    if not result.valid:
        raise HTTPException(status_code=422, detail={
            "message": "Scene failed validation",
            "diagnostics": [d.to_dict() for d in result.diagnostics],
        })


# --- Health Check ---

@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


# --- Validation ---

@app.post("/api/validate")
async def validate(scene: Any = Body(...)):
    """
    Validate a scene description.

    Always answers 200; an invalid scene is reported through
    `valid: false` and the diagnostics.
    """
    result = validate_scene(scene)
    return {
        **result.to_dict(),
        "summary": validation_summary(result),
    }


# --- Graph ---

@app.post("/api/graph")
async def build_graph(request: GraphRequest):
    """Convert a valid scene into positioned nodes and relation edges."""
    _reject_invalid(request.scene)
    graph = scene_to_graph(
        Scene.from_json_dict(request.scene),
        request.canvas,
        positions=request.positions,
        auto_layout=request.auto_layout,
    )
    return {"success": True, "graph": graph.to_json_dict()}


# --- Layout ---

@app.post("/api/layout")
async def layout(request: LayoutRequest):
    """Compute a position for every element with the chosen strategy."""
    try:
        config = LayoutConfig.resolve(request.config)
        outcome = layout_scene(
            request.scene,
            strategy=request.strategy,
            config=config,
            positions=request.positions,
            fixed=request.fixed,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid layout config: {e.errors()}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not outcome.valid:
        raise HTTPException(status_code=422, detail={
            "message": "Scene failed validation",
            "diagnostics": [d.to_dict() for d in outcome.validation.diagnostics],
        })

    return {
        "success": True,
        "strategy": request.strategy,
        "positions": {k: p.model_dump() for k, p in outcome.positions.items()},
        "warnings": [d.to_dict() for d in outcome.validation.warnings],
    }


# --- Run with uvicorn ---

def run(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT):
    import uvicorn
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
