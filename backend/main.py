"""FastAPI entry point - thin layer over the dashboard service."""

import io
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from core.config import AssetPaths
from core.models import FloorSelector, KpiName, Mode
from ingest.normalizer import month_options
from services.dashboard import DashboardService

logging.basicConfig(level=logging.WARNING, format="%(name)s | %(message)s")
logging.getLogger("services.dashboard").setLevel(logging.INFO)
logging.getLogger("ingest.feed").setLevel(logging.INFO)

service = DashboardService()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await service.load_assets(AssetPaths.from_env())
    yield


app = FastAPI(title="Building KPI Dashboard API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Response / request models
# ---------------------------------------------------------------------------


class Options(BaseModel):
    kpis: list[str]
    months: list[str]
    floors: list[str]
    modes: list[str]


class SelectionBody(BaseModel):
    kpi: KpiName | None = None
    month: str | None = None
    mode: Mode | None = None
    floor: FloorSelector | None = None


class GaugeOut(BaseModel):
    percent: float
    text: str


class StateOut(BaseModel):
    kpi: str
    month: str
    mode: str
    floor: str
    kpi_value: float
    per_room: dict[str, float]
    gauge: GaugeOut
    scene_ready: bool
    pending: bool


class SeriesPointOut(BaseModel):
    time: str
    value: float


class RoomShareOut(BaseModel):
    name: str
    value: float


class LabelOut(BaseModel):
    room_id: str
    text: str
    position: list[float]
    font_size: float
    color: str
    font_weight: int
    visible: bool


class OverlayOut(BaseModel):
    room_id: str
    value: float
    intensity: float
    position: list[float]
    rotation: list[float]
    size: list[float]
    opacity: float
    visible: bool


class NodeOut(BaseModel):
    name: str
    visible: bool
    color: str | None
    textured: bool


def _state() -> StateOut:
    snap = service.snapshot()
    return StateOut(
        kpi=snap.selection.kpi.value,
        month=snap.selection.month,
        mode=snap.selection.mode.value,
        floor=snap.selection.floor.value,
        kpi_value=snap.kpi_value,
        per_room=snap.per_room,
        gauge=GaugeOut(percent=snap.gauge.percent, text=snap.gauge.text),
        scene_ready=snap.scene_ready,
        pending=snap.pending,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/options")
def get_options() -> Options:
    return Options(
        kpis=[k.value for k in KpiName],
        months=month_options(),
        floors=[f.value for f in FloorSelector],
        modes=[m.value for m in Mode],
    )


@app.get("/state")
def get_state() -> StateOut:
    return _state()


@app.post("/selection")
def post_selection(body: SelectionBody) -> StateOut:
    if body.month is not None and body.month not in month_options():
        raise HTTPException(status_code=422, detail=f"Unknown month {body.month!r}")
    service.select(kpi=body.kpi, month=body.month, mode=body.mode, floor=body.floor)
    return _state()


@app.get("/series")
def get_series() -> list[SeriesPointOut]:
    return [SeriesPointOut(time=p.time, value=p.value) for p in service.series()]


@app.get("/rooms/share")
def get_room_shares() -> list[RoomShareOut]:
    return [RoomShareOut(name=s.name, value=s.value) for s in service.room_shares()]


@app.get("/scene/labels")
def get_labels() -> list[LabelOut]:
    return [
        LabelOut(
            room_id=label.room_id,
            text=label.text,
            position=label.position.tolist(),
            font_size=label.font_size,
            color=label.color,
            font_weight=label.font_weight,
            visible=label.visible,
        )
        for label in service.labels
    ]


@app.get("/scene/overlays")
def get_overlays() -> list[OverlayOut]:
    return [
        OverlayOut(
            room_id=overlay.room_id,
            value=overlay.value,
            intensity=overlay.intensity,
            position=overlay.position.tolist(),
            rotation=overlay.rotation.tolist(),
            size=[overlay.size.width, overlay.size.height, overlay.size.depth],
            opacity=overlay.material.opacity if overlay.material else 1.0,
            visible=overlay.visible,
        )
        for overlay in service.overlays
    ]


@app.get("/scene/overlays/{room_id}/texture.png")
def get_overlay_texture(room_id: str) -> Response:
    image = service.overlay_texture(room_id)
    if image is None:
        raise HTTPException(status_code=404, detail=f"No overlay for {room_id!r}")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return Response(content=buffer.getvalue(), media_type="image/png")


@app.get("/scene/nodes")
def get_scene_nodes() -> list[NodeOut]:
    if service.scene is None:
        return []
    return [
        NodeOut(
            name=node.name,
            visible=node.visible,
            color=node.material.color.hex if node.material else None,
            textured=bool(node.material and node.material.map),
        )
        for node in service.scene.traverse()
        if node.is_mesh and not node.auxiliary
    ]
