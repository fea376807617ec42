"""
Party API routes (customers and suppliers).

Endpoints:
  GET    /api/parties                   – list, filter by type / search
  GET    /api/parties/{id}              – one party
  POST   /api/parties                   – create or update (balance is read-only)
  DELETE /api/parties/{id}              – delete
  GET    /api/parties/{id}/statement    – invoices, cash entries and totals
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator

from shopledger.core.database import get_bookkeeper
from shopledger.engine.bookkeeper import Bookkeeper
from shopledger.models import Party, PartyType
from shopledger.schemas.responses import PartyStatement

party_router = APIRouter(prefix="/api/parties", tags=["parties"])

# ── Pydantic schemas ──────────────────────────────────────────────────────────


class PartyIn(BaseModel):
    id: str = ""
    name: str = Field(min_length=1)
    phone: str = ""
    email: Optional[str] = None
    address: Optional[str] = None
    reference_code: Optional[str] = None
    type: PartyType = PartyType.CUSTOMER

    @field_validator("name", "phone")
    @classmethod
    def strip(cls, v: str) -> str:
        return v.strip()


# ── Endpoints ─────────────────────────────────────────────────────────────────


@party_router.get("", response_model=list[Party])
def list_parties(
    type: Optional[PartyType] = Query(default=None),
    search: Optional[str] = Query(default=None, description="Name, phone or email"),
    keeper: Bookkeeper = Depends(get_bookkeeper),
):
    return keeper.catalog.parties(type, search)


@party_router.get("/{party_id}", response_model=Party)
def get_party(party_id: str, keeper: Bookkeeper = Depends(get_bookkeeper)):
    party = keeper.catalog.get_party(party_id)
    if not party:
        raise HTTPException(status_code=404, detail="Party not found")
    return party


@party_router.post("", response_model=Party)
def save_party(body: PartyIn, keeper: Bookkeeper = Depends(get_bookkeeper)):
    return keeper.catalog.save_party(Party(**body.model_dump()))


@party_router.delete("/{party_id}")
def delete_party(party_id: str, keeper: Bookkeeper = Depends(get_bookkeeper)) -> dict:
    if not keeper.catalog.delete_party(party_id):
        raise HTTPException(status_code=404, detail="Party not found")
    return {"status": "deleted", "id": party_id}


@party_router.get("/{party_id}/statement", response_model=PartyStatement)
def party_statement(party_id: str, keeper: Bookkeeper = Depends(get_bookkeeper)):
    statement = keeper.reports.party_statement(party_id)
    if statement is None:
        raise HTTPException(status_code=404, detail="Party not found")
    return statement
