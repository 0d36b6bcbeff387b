from fastapi import APIRouter

from market_pulse.alerts.schemas import Alert, AlertCondition, AlertCreate, AlertTrigger
from market_pulse.dependencies import AlertServiceDep

router = APIRouter()


@router.get("/", response_model=list[Alert])
async def list_alerts(service: AlertServiceDep) -> list[Alert]:
    return service.list_alerts()


@router.post("/", status_code=201, response_model=Alert)
async def set_alert(data: AlertCreate, service: AlertServiceDep) -> Alert:
    return service.set_alert(data)


@router.post("/check", response_model=list[AlertTrigger])
async def check_alerts(service: AlertServiceDep) -> list[AlertTrigger]:
    return await service.check()


@router.delete("/{ticker}/{condition}", status_code=204)
async def remove_alert(ticker: str, condition: AlertCondition, service: AlertServiceDep) -> None:
    service.remove_alert(ticker, condition)
