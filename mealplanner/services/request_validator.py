from typing import Optional
from fastapi import HTTPException
from mealplanner.core.config import EngineConfig, load_engine_config
from mealplanner.models import PlanMealRequest


class RequestValidator:
    def __init__(self, config: Optional[EngineConfig] = None):
        config = config or load_engine_config()
        self.max_amount = config.max_amount
        self.max_days = config.max_days

    def validate(self, request: PlanMealRequest):
        """
        Checks the request against the service limits.
        Raises HTTPException(400) if a limit is exceeded.
        """

        # 1. Check Amount Limit
        if request.amount > self.max_amount:
            raise HTTPException(
                status_code=400,
                detail={
                    "error_code": "AMOUNT_LIMIT_EXCEEDED",
                    "message": f"You requested {request.amount} recipes, but the maximum is {self.max_amount}.",
                    "suggestion": f"Please request {self.max_amount} recipes or fewer."
                }
            )

        # 2. Check Day Limit
        days = len(request.constraints)
        if days > self.max_days:
            raise HTTPException(
                status_code=400,
                detail={
                    "error_code": "DAY_LIMIT_EXCEEDED",
                    "message": f"You sent constraints for {days} days, but the maximum is {self.max_days} days.",
                    "suggestion": f"Please send constraints for {self.max_days} days or fewer."
                }
            )

request_validator = RequestValidator()
