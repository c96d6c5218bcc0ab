from pydantic import BaseModel, Field
from typing import List, Optional

from psd_engine.delivery.schemas.template import (
    DesignValidationReport,
    SerializableLayer,
    TemplateMetadata,
    TransformedPayload,
)

class DocumentSource(BaseModel):
    # URL, local path, data URI or raw base64 of the PSD buffer
    source: str

class ContainerContextRequest(DocumentSource):
    container_name: str

class PreviewRequest(DocumentSource):
    payload: TransformedPayload

class AnalysisResult(BaseModel):
    template: TemplateMetadata
    layers: List[SerializableLayer] = Field(default_factory=list)
    validation: DesignValidationReport

class PreviewResult(BaseModel):
    preview: Optional[str] = None
