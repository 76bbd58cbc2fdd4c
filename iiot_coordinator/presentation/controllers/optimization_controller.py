"""Line and plant optimisation endpoints."""

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from iiot_coordinator.application.dtos.optimization_dto import (
    LineOptimizationRequestDTO,
    LineOptimizationResultDTO,
    PlantAnalysisRequestDTO,
    PlantOptimizationResultDTO,
)
from iiot_coordinator.application.use_cases.optimization_use_cases import (
    AnalyzePlantOptimizationUseCase,
    OptimizeProductionLineUseCase,
)

router = APIRouter(tags=["Optimization"])


@router.post("/lines/{line_id}/optimize", response_model=LineOptimizationResultDTO)
@inject
async def optimize_line(
    line_id: str,
    request: LineOptimizationRequestDTO,
    optimize_production_line_use_case: OptimizeProductionLineUseCase = Depends(
        Provide["optimize_production_line_use_case"]
    ),
) -> LineOptimizationResultDTO:
    """
    Compute target production rates for the devices of a line.

    Devices must be listed in physical line order, upstream first.
    """
    return optimize_production_line_use_case.execute(line_id, request)


@router.post("/plant/analyze", response_model=PlantOptimizationResultDTO)
@inject
async def analyze_plant(
    request: PlantAnalysisRequestDTO,
    analyze_plant_optimization_use_case: AnalyzePlantOptimizationUseCase = Depends(
        Provide["analyze_plant_optimization_use_case"]
    ),
) -> PlantOptimizationResultDTO:
    """Recommend load balancing, energy and maintenance actions across lines."""
    return analyze_plant_optimization_use_case.execute(request)
