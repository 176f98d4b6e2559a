"""POST/GET /api/executions — run a dashboard item's SQL and inspect its execution history."""
from fastapi import APIRouter, Depends, HTTPException

from api.deps import Services, get_services, resolve_connection_string
from models.execution import Execution
from models.query import ExecutionRequest

router = APIRouter()


@router.post("/executions", response_model=Execution, status_code=201)
def refresh_item(req: ExecutionRequest, services: Services = Depends(get_services)):
    connection_string = resolve_connection_string(req.connection_string)
    return services.executor.execute_dashboard_item(req.dashboard_item_id, req.sql, connection_string)


@router.get("/executions/{dashboard_item_id}")
def list_executions(dashboard_item_id: str, services: Services = Depends(get_services)):
    executions = services.executor.store.list_for_item(dashboard_item_id)
    if not executions:
        raise HTTPException(404, detail=f"No executions recorded for item '{dashboard_item_id}'.")
    return {"executions": executions}
