"""
SplitIt - FastAPI Web Backend

This module serves as the main entry point for the SplitIt shared-expense
API.

Features:
    - RESTful API for managing participants and expenses
    - Pluggable store (in-memory or Firebase Firestore)
    - Balance and settlement calculations

Endpoints:
    GET    /participants          - List participants
    POST   /participants          - Add a participant
    DELETE /participants/{name}   - Remove a participant and their expenses
    GET    /expenses              - List expenses
    POST   /expenses              - Add an expense
    PUT    /expenses/{expense_id} - Edit an expense
    DELETE /expenses/{expense_id} - Remove an expense
    GET    /balances              - Net balance per participant
    GET    /settlements           - Who pays whom
    GET    /health                - Health check

Usage:
    uvicorn main:create_app --factory --reload
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from config.settings import Settings
from expenses import add_expense, edit_expense, get_expenses, remove_expense
from models import Expense
from participants import add_participant, get_participants, remove_participant
from settlement import compute_settlements
from splitter import compute_balances
from store import ExpenseStore, NotFound, create_store
from utils import describe_settlement, round_amount, rounded_balances

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models for Request/Response Validation
# =============================================================================

class ParticipantCreate(BaseModel):
    """Request model for adding a participant."""
    name: str = Field(..., min_length=1, description="Participant name")


class ParticipantResponse(BaseModel):
    """Response model for participant data."""
    name: str


class ParticipantRemoved(BaseModel):
    """Response model for a removed participant."""
    name: str
    removed_expenses: list[str]


class ExpenseCreate(BaseModel):
    """Request model for adding or editing an expense."""
    description: str = Field(..., min_length=1, description="What the money was spent on")
    amount: float = Field(..., gt=0, description="Expense amount (must be > 0)")
    paid_by: str = Field(..., min_length=1, description="Name of the participant who paid")
    shared_by: list[str] = Field(..., min_length=1, description="Names of the participants sharing the cost")


class ExpenseResponse(BaseModel):
    """Response model for expense data."""
    expense_id: str
    description: str
    amount: float
    paid_by: str
    shared_by: list[str]


class BalancesResponse(BaseModel):
    """Response model for balances (rounded for display)."""
    balances: dict[str, float]


class TransferResponse(BaseModel):
    """Response model for a single transfer."""
    model_config = ConfigDict(populate_by_name=True)

    from_participant: str = Field(..., alias="from")
    to_participant: str = Field(..., alias="to")
    amount: float
    description: str


class SettlementsResponse(BaseModel):
    """Response model for the settlement plan."""
    balances: dict[str, float]
    settlements: list[TransferResponse]


# =============================================================================
# Helper Functions
# =============================================================================

def get_store(request: Request) -> ExpenseStore:
    """Dependency returning the store attached to the application."""
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    """Dependency returning the settings attached to the application."""
    return request.app.state.settings


def _expense_response(e: Expense) -> ExpenseResponse:
    return ExpenseResponse(**e.to_dict())


def _current_balances(store: ExpenseStore, settings: Settings) -> dict:
    participants = get_participants(store)
    expenses = [e.to_dict() for e in get_expenses(store)]
    return compute_balances(participants, expenses, strict=settings.strict)


# =============================================================================
# FastAPI Application
# =============================================================================

def create_app(settings: Optional[Settings] = None, store: Optional[ExpenseStore] = None) -> FastAPI:
    """
    Build the API.

    Args:
        settings: Configuration; read from the environment when omitted.
        store: Backing store; built from ``settings`` when omitted.

    Nothing is built at import time; uvicorn calls this as a factory.
    """
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(
        title="SplitIt",
        description="Shared expense tracking and settlement API",
        version="1.0.0"
    )
    app.state.settings = settings
    app.state.store = store if store is not None else create_store(settings)

    @app.get("/participants", response_model=list[ParticipantResponse])
    async def list_participants(store: ExpenseStore = Depends(get_store)):
        """List participants in roster order."""
        try:
            return [ParticipantResponse(name=name) for name in get_participants(store)]
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.post("/participants", response_model=ParticipantResponse, status_code=201)
    async def create_participant(data: ParticipantCreate, store: ExpenseStore = Depends(get_store)):
        """Add a participant. Duplicate names are rejected."""
        try:
            return ParticipantResponse(name=add_participant(store, data.name))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.delete("/participants/{name}", response_model=ParticipantRemoved)
    async def delete_participant(name: str, store: ExpenseStore = Depends(get_store)):
        """Remove a participant and every expense they are involved in."""
        try:
            removed = remove_participant(store, name)
            return ParticipantRemoved(name=name.strip(), removed_expenses=removed)
        except NotFound as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.get("/expenses", response_model=list[ExpenseResponse])
    async def list_expenses(store: ExpenseStore = Depends(get_store)):
        """List expenses in the order they were added."""
        try:
            return [_expense_response(e) for e in get_expenses(store)]
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.post("/expenses", response_model=ExpenseResponse, status_code=201)
    async def create_expense(data: ExpenseCreate, store: ExpenseStore = Depends(get_store)):
        """Add an expense. The payer and every sharer must be participants."""
        try:
            expense = add_expense(
                store,
                description=data.description,
                amount=data.amount,
                paid_by=data.paid_by,
                shared_by=data.shared_by
            )
            return _expense_response(expense)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.put("/expenses/{expense_id}", response_model=ExpenseResponse)
    async def update_expense(expense_id: str, data: ExpenseCreate, store: ExpenseStore = Depends(get_store)):
        """Replace an expense, keeping its id."""
        try:
            expense = edit_expense(
                store,
                expense_id,
                description=data.description,
                amount=data.amount,
                paid_by=data.paid_by,
                shared_by=data.shared_by
            )
            return _expense_response(expense)
        except NotFound as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.delete("/expenses/{expense_id}", status_code=204)
    async def delete_expense(expense_id: str, store: ExpenseStore = Depends(get_store)):
        """Remove an expense."""
        try:
            remove_expense(store, expense_id)
        except NotFound as e:
            raise HTTPException(status_code=404, detail=str(e))
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.get("/balances", response_model=BalancesResponse)
    async def get_balances(
        store: ExpenseStore = Depends(get_store),
        settings: Settings = Depends(get_settings)
    ):
        """Net balance per participant, rounded to cents."""
        try:
            return BalancesResponse(balances=rounded_balances(_current_balances(store, settings)))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.get("/settlements", response_model=SettlementsResponse)
    async def get_settlements(
        store: ExpenseStore = Depends(get_store),
        settings: Settings = Depends(get_settings)
    ):
        """
        Who pays whom.

        Request flow:
            1. Fetch participants and expenses from the store
            2. Calculate balances (splitter.py)
            3. Match debtors with creditors (settlement.py)
            4. Round amounts for display (utils.py)
        """
        try:
            balances = _current_balances(store, settings)
            transfers = compute_settlements(balances)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))

        return SettlementsResponse(
            balances=rounded_balances(balances),
            settlements=[
                TransferResponse(**dict(
                    t.to_dict(),
                    amount=round_amount(t.amount),
                    description=describe_settlement(t)
                ))
                for t in transfers
            ]
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint to verify API is running."""
        return {"status": "healthy", "service": "SplitIt"}

    return app


# =============================================================================
# Run with: python main.py
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:create_app", factory=True, host="127.0.0.1", port=8000, reload=True)
