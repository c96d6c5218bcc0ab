# psd_engine/delivery/schemas/template.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

LayerKind = Literal["layer", "group", "generative"]

class WireModel(BaseModel):
    # camelCase on the wire, snake_case in Python; both accepted on input
    model_config = ConfigDict(populate_by_name=True)

class Rect(WireModel):
    x: float = 0
    y: float = 0
    w: float = 0
    h: float = 0

class CanvasSize(WireModel):
    width: int = Field(1, ge=1)
    height: int = Field(1, ge=1)

class CanvasDimensions(WireModel):
    w: int
    h: int

class ContainerDefinition(WireModel):
    id: str
    name: str
    original_name: str = Field(alias="originalName")
    bounds: Rect
    normalized: Rect

class TemplateMetadata(WireModel):
    canvas: CanvasSize
    containers: List[ContainerDefinition] = Field(default_factory=list)

class ContainerContext(WireModel):
    container_name: str = Field(alias="containerName")
    bounds: Rect
    canvas_dimensions: CanvasDimensions = Field(alias="canvasDimensions")

class SerializableLayer(WireModel):
    id: str
    name: str
    kind: LayerKind = Field("layer", alias="type")
    is_visible: bool = Field(True, alias="isVisible")
    opacity: float = Field(1.0, ge=0, le=1)
    coords: Rect
    children: Optional[List["SerializableLayer"]] = None

class LayerTransform(WireModel):
    rotation: float = 0
    scale: Optional[float] = None

class TransformedLayer(WireModel):
    id: str
    name: Optional[str] = None
    kind: LayerKind = Field("layer", alias="type")
    is_visible: bool = Field(True, alias="isVisible")
    opacity: float = Field(1.0, ge=0, le=1)
    coords: Rect
    transform: LayerTransform = Field(default_factory=LayerTransform)
    children: Optional[List["TransformedLayer"]] = None

class TargetMetrics(WireModel):
    w: int
    h: int
    x: float = 0
    y: float = 0

class PayloadMetrics(WireModel):
    target: TargetMetrics

class TransformedPayload(WireModel):
    metrics: PayloadMetrics
    layers: List[TransformedLayer] = Field(default_factory=list)
    # one preview image shared by every generative layer in the payload
    preview_url: Optional[str] = Field(None, alias="previewUrl")

class ValidationIssue(WireModel):
    layer_name: str = Field(alias="layerName")
    container_name: str = Field(alias="containerName")
    type: Literal["PROCEDURAL_VIOLATION"] = "PROCEDURAL_VIOLATION"
    message: str

class DesignValidationReport(WireModel):
    is_valid: bool = Field(alias="isValid")
    issues: List[ValidationIssue] = Field(default_factory=list)

SerializableLayer.model_rebuild()
TransformedLayer.model_rebuild()
