# psd_engine/domain/design_validator.py
import logging
from typing import Dict, List

from psd_engine.delivery.schemas.template import (
    ContainerDefinition,
    DesignValidationReport,
    TemplateMetadata,
    ValidationIssue,
)
from psd_engine.domain.native import NativeDocument, NativeNode, has_full_bounds
from psd_engine.domain.template_extractor import clean_container_name, is_template_root

logger = logging.getLogger(__name__)


def exceeded_edges(node: NativeNode, container: ContainerDefinition) -> List[str]:
    box = container.bounds
    edges = []
    if node.left < box.x:
        edges.append("left")
    if node.top < box.y:
        edges.append("top")
    if node.right > box.x + box.w:
        edges.append("right")
    if node.bottom > box.y + box.h:
        edges.append("bottom")
    return edges


def check_group(group: NativeNode, container: ContainerDefinition) -> List[ValidationIssue]:
    issues = []
    for index, child in enumerate(group.children or []):
        if not has_full_bounds(child):
            continue
        edges = exceeded_edges(child, container)
        if not edges:
            continue
        layer_name = child.name or f"Layer {index}"
        issues.append(ValidationIssue(
            layer_name=layer_name,
            container_name=container.name,
            message=(
                f"Layer '{layer_name}' extends past the {', '.join(edges)} "
                f"edge(s) of container '{container.name}'."
            ),
        ))
    return issues


def validate_design(document: NativeDocument, template: TemplateMetadata) -> DesignValidationReport:
    issues: List[ValidationIssue] = []

    if not document.children:
        issues.append(ValidationIssue(
            layer_name="Root",
            container_name="Global",
            message="PSD appears empty or missing design layers.",
        ))

    containers: Dict[str, ContainerDefinition] = {c.name: c for c in template.containers}
    for group in document.children or []:
        if is_template_root(group):
            continue
        container = containers.get(group.name) or containers.get(clean_container_name(group.name or ""))
        if container is None:
            continue
        found = check_group(group, container)
        if found:
            logger.info(f"Design group '{group.name}': {len(found)} layer(s) outside container.")
        issues.extend(found)

    return DesignValidationReport(is_valid=not issues, issues=issues)
