"""FastAPI application factory."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from meal_planner.api.models import (
    GeneratePlanRequest,
    MealPlanOut,
    MealReplacementOut,
)
from meal_planner.app_logging import configure_logging
from meal_planner.containers import AppContainer
from meal_planner.domain.errors import (
    AuthorizationError,
    CatalogUnavailableError,
    MealPlannerError,
    NotFoundError,
    UnsatisfiableSlotError,
    ValidationError,
)

_ERROR_STATUS = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    UnsatisfiableSlotError: status.HTTP_409_CONFLICT,
    CatalogUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()

    app = FastAPI()
    app.state.container = container

    @app.exception_handler(MealPlannerError)
    async def meal_planner_error(_: Request, exc: MealPlannerError) -> JSONResponse:
        status_code = _ERROR_STATUS.get(
            type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/members/{member_id}/meal-plans", status_code=201)
    def generate_plan(
        member_id: str, body: GeneratePlanRequest, request: Request
    ) -> MealPlanOut:
        """Generate and store a meal plan for a member."""
        state_container: AppContainer = request.app.state.container
        plan = state_container.meal_plan_orchestrator.generate_and_save_plan(
            member_id,
            days=body.days or state_container.settings.plan_default_days,
            start_date=body.start_date,
        )
        return MealPlanOut.from_domain(plan)

    @app.post("/members/{member_id}/meals/{meal_id}/replace")
    def replace_meal(
        member_id: str, meal_id: str, request: Request
    ) -> MealReplacementOut:
        """Replace one planned meal with a nutritionally similar recipe."""
        state_container: AppContainer = request.app.state.container
        replacement = state_container.meal_plan_orchestrator.replace_meal(
            meal_id, member_id
        )
        return MealReplacementOut.from_domain(replacement)

    return app
