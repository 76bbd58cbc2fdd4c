"""Use cases exposing the decision engine's line and plant analyses."""

from iiot_coordinator.application.dtos.optimization_dto import (
    LineOptimizationRequestDTO,
    LineOptimizationResultDTO,
    PlantAnalysisRequestDTO,
    PlantOptimizationResultDTO,
)
from iiot_coordinator.domain.services.decision_engine import DecisionEngine
from iiot_coordinator.shared import get_logger

logger = get_logger(__name__)


class OptimizeProductionLineUseCase:
    def __init__(self, decision_engine: DecisionEngine):
        self.decision_engine = decision_engine

    def execute(
        self, line_id: str, request: LineOptimizationRequestDTO
    ) -> LineOptimizationResultDTO:
        statuses = [device.to_domain() for device in request.devices]
        result = self.decision_engine.optimize_production_line(line_id, statuses)
        logger.info(
            "optimization.line.completed",
            line_id=line_id,
            optimization_type=result.optimization_type,
            bottleneck=result.bottleneck_device,
            expected_throughput=result.expected_throughput,
        )
        return LineOptimizationResultDTO.from_domain(result)


class AnalyzePlantOptimizationUseCase:
    def __init__(self, decision_engine: DecisionEngine):
        self.decision_engine = decision_engine

    def execute(self, request: PlantAnalysisRequestDTO) -> PlantOptimizationResultDTO:
        result = self.decision_engine.analyze_plant_optimization(
            [line.to_domain() for line in request.lines]
        )
        logger.info(
            "optimization.plant.completed",
            optimization_needed=result.optimization_needed,
            actions=result.recommended_actions,
        )
        return PlantOptimizationResultDTO.from_domain(result)
