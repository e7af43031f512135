from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from assembly_tool import __version__
from assembly_tool.engine.models import Category, Component, Selection
from assembly_tool.services.configurator_service import ConfiguratorService
from assembly_tool.api.quotes_api import router as quotes_router
from assembly_tool.api.state import get_service, reload_service
from assembly_tool.data.build_catalog import CatalogBuildError

app = FastAPI(
    title="Assembly Tool API",
    description="Backend API for the assembly configurator and quoting engine",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include quote management API
app.include_router(quotes_router)


class SelectionCreate(BaseModel):
    name: Optional[str] = None


class ComponentChoice(BaseModel):
    component_id: str
    force: bool = False


def component_dict(component: Component) -> dict:
    return {
        "id": component.id,
        "name": component.name,
        "category": component.category.value,
        "categoryLabel": component.category.label,
        "description": component.description,
        "basePrice": str(component.base_price),
        "specifications": dict(component.specifications),
        "compatibilityTags": sorted(component.compatibility_tags),
        "requiredTags": sorted(component.required_tags),
        "modelFileName": component.model_file_name,
        "thumbnailName": component.thumbnail_name,
    }


def selection_dict(selection: Selection) -> dict:
    data = selection.to_dict()
    data["components"] = [component_dict(c) for c in selection.components]
    data["complete"] = selection.is_complete()
    return data


def _not_found_or_bad_request(e: ValueError) -> HTTPException:
    status = 404 if "not found" in str(e) else 400
    return HTTPException(status_code=status, detail=str(e))


@app.get("/")
async def root():
    return {"status": "online", "message": "Assembly Tool API Active"}


@app.get("/catalog")
async def get_catalog(category: Optional[Category] = None, service: ConfiguratorService = Depends(get_service)):
    components = service.catalog.components_in(category) if category else service.catalog.components
    return [component_dict(c) for c in components]


@app.get("/catalog/{component_id}")
async def get_component(component_id: str, service: ConfiguratorService = Depends(get_service)):
    component = service.catalog.get_component(component_id)
    if component is None:
        raise HTTPException(status_code=404, detail=f"Component '{component_id}' not found")
    return component_dict(component)


@app.get("/selections")
async def list_selections(service: ConfiguratorService = Depends(get_service)):
    return [selection_dict(s) for s in service.list_selections()]


@app.post("/selections", status_code=201)
async def create_selection(body: SelectionCreate, service: ConfiguratorService = Depends(get_service)):
    return selection_dict(service.new_selection(body.name))


@app.get("/selections/{selection_id}")
async def get_selection(selection_id: str, service: ConfiguratorService = Depends(get_service)):
    try:
        selection = service.get_selection(selection_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    data = selection_dict(selection)
    next_category = service.next_category(selection_id)
    data["nextCategory"] = next_category.value if next_category else None
    return data


@app.delete("/selections/{selection_id}")
async def delete_selection(selection_id: str, service: ConfiguratorService = Depends(get_service)):
    try:
        service.delete_selection(selection_id)
        return {"success": True, "message": f"Selection '{selection_id}' deleted"}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.put("/selections/{selection_id}/components")
async def select_component(
    selection_id: str, body: ComponentChoice, service: ConfiguratorService = Depends(get_service)
):
    try:
        selection = service.select_component(selection_id, body.component_id, force=body.force)
    except ValueError as e:
        raise _not_found_or_bad_request(e)
    return selection_dict(selection)


@app.delete("/selections/{selection_id}/components/{category}")
async def remove_component(
    selection_id: str, category: Category, service: ConfiguratorService = Depends(get_service)
):
    try:
        return selection_dict(service.remove_component(selection_id, category))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/selections/{selection_id}/compatible/{category}")
async def get_compatible(
    selection_id: str, category: Category, service: ConfiguratorService = Depends(get_service)
):
    try:
        components = service.compatible_components(selection_id, category)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [component_dict(c) for c in components]


@app.get("/selections/{selection_id}/validity")
async def get_validity(selection_id: str, service: ConfiguratorService = Depends(get_service)):
    try:
        return service.validate(selection_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/selections/{selection_id}/bill")
async def get_bill(selection_id: str, service: ConfiguratorService = Depends(get_service)):
    try:
        bill = service.generate_bill(selection_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    data = bill.to_dict()
    data["trace"] = bill.get_trace_text()
    return data


@app.get("/system/status")
async def get_status(service: ConfiguratorService = Depends(get_service)):
    catalog = service.catalog
    return {
        "engine_active": True,
        "components_count": len(catalog),
        "compatibility_rules_count": len(catalog.compatibility_rules),
        "pricing_rules_count": len(catalog.pricing_rules),
        "rules_loaded": service.pricing_engine.rule_matcher.loaded,
    }


@app.post("/system/reload")
async def reload_catalog():
    """Re-read the catalog CSVs and rebuild the service."""
    try:
        service = reload_service()
    except (FileNotFoundError, CatalogBuildError) as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "components_count": len(service.catalog)}
